"""Command line front end for the versioned store."""
