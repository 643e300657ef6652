"""
Framework-light building blocks shared by the app service layers:
``access`` (actor context, role scoping), ``exceptions`` and their DRF
``exception_handler``, ``transactions`` (compare-and-set writes) and
``notifications``.
"""
