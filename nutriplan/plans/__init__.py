# -*- coding: utf-8 -*-
"""
Daily plans

Deterministic meal/workout assembly and scoped reconciliation into storage.
"""
