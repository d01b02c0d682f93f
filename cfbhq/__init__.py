"""CFB HQ: college football data API."""
