"""Event handlers for Lidora customers, chefs and payments."""
