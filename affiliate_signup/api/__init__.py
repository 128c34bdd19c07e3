"""HTTP surface for the affiliate registration workflow."""
