"""
chantier

Construction site manager: projects, buildings, contractors, reserves
(punch-list defects), task planning and reception minutes (PV).
"""

__version__ = "0.1.0"
