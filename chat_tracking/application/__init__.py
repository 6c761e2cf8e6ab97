"""Application layer: service orchestrators over the database and trace sink."""
