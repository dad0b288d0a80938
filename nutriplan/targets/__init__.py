# -*- coding: utf-8 -*-
"""
Daily calorie and macro targets

Local formula (Mifflin-St Jeor based) plus an optional remote estimator.
"""

from .calculator import compute_targets
from .estimator import resolve_targets
from .models import BiometricProfile, TargetSet

__all__ = [
    'BiometricProfile',
    'TargetSet',
    'compute_targets',
    'resolve_targets',
]
