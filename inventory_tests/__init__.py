"""Data-driven test oracle for the inventory management web application."""
