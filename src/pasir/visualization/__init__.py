"""Figures and animations for pasir."""
