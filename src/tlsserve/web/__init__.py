"""HTTP dispatch: routing table and the Flask application built from it."""
