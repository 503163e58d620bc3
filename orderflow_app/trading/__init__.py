"""
Trading module.

Order and trade models, single-bar trade execution, currency conversion,
session aggregates and performance grading.
"""
