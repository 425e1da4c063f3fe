"""Store access for users, permissions and sidebar configurations."""
