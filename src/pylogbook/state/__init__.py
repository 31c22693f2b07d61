"""State layer.

Holds the single mutable :class:`~pylogbook.state.store.LogbookState` a
trigger engine owns: interpreted telemetry, a raw mirror of everything
else, and the bookkeeping rules keep between updates (running maxima,
last logged course, assembled sail phrase).
"""
