"""Route modules for the Products4U API."""
