"""Forum feed service: ranked feeds, comment trees and notifications."""

__version__ = "0.1.0"
