"""
NutriCare patient registry.

Registers clinic patients, derives BMI and ideal weight from their
measurements, and keeps the patient list in local storage.
"""

__version__ = "1.0.0"
