"""Configuration, logging and errors shared by every eemaps module."""
