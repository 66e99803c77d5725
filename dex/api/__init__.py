"""HTTP interface for the exchange engine."""
