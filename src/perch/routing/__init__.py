"""Routing — template compilation, ordered registry, parameter binding.

Routes are registered during setup and frozen into an immutable,
ordered table before the first request is dispatched.
"""
