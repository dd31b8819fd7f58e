"""Presentation surfaces for the quote view model.

A surface emits Input events (screen shown, refresh pressed) and renders
the Output events it receives back, without the view model knowing which
front-end it is talking to.
"""
