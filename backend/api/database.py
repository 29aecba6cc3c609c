"""
In-memory session registry.

Map sessions live only as long as the process; the saved-place list is the
only durable state.
"""
from typing import Dict
from services.map_session import MapSession

# In-memory storage
sessions_db: Dict[str, MapSession] = {}
