# -*- coding: utf-8 -*-
"""Nutrition target and daily plan engine."""
