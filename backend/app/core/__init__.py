"""Domain-neutral building blocks shared by services and routes."""
