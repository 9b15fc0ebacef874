"""Pure helpers shared by the overlay and drivers."""
