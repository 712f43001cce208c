"""Lambda handlers for the posts CRUD API."""
