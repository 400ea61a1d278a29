"""
Reservation data access functions.
Handles reservation CRUD, room assignments, availability checking and
yearly numbering.

This module re-exports all functions from the split modules:
- reservation_crud.py: Create, read, update, delete operations
- reservation_availability.py: Overlap detection and available rooms
- reservation_number.py: Yearly reservation number allocation
"""

# =============================================================================
# RE-EXPORTS
# =============================================================================

# CRUD operations
from .reservation_crud import (
    # Read
    get_reservation_by_id,
    get_reservation_room_ids,
    get_reservations_filtered,
    # Write
    insert_reservation,
    insert_reservation_rooms,
    replace_reservation_rooms,
    update_reservation_fields,
    delete_reservation_row,
)

# Availability
from .reservation_availability import (
    ranges_overlap,
    find_room_conflicts,
    get_conflicting_room_names,
    get_available_rooms,
)

# Numbering
from .reservation_number import (
    generate_reservation_number,
)

__all__ = [
    'get_reservation_by_id',
    'get_reservation_room_ids',
    'get_reservations_filtered',
    'insert_reservation',
    'insert_reservation_rooms',
    'replace_reservation_rooms',
    'update_reservation_fields',
    'delete_reservation_row',
    'ranges_overlap',
    'find_room_conflicts',
    'get_conflicting_room_names',
    'get_available_rooms',
    'generate_reservation_number',
]
