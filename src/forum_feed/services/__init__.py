"""Service layer: ranking, paging and tree reconstruction for the feeds."""
