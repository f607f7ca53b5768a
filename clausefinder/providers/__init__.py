"""Concrete backend adapters implementing the interfaces in :mod:`clausefinder.interfaces`."""
