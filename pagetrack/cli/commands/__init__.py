"""Commands of the pagetrack CLI."""
