"""HTTP interface for the catpoint security system."""
