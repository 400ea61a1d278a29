"""
Centralized UI messages.
All user-facing text kept in one place for consistency.
"""

MESSAGES = {
    # Success messages
    'login_success': 'Welcome {name}',
    'logout_success': 'You have been logged out',
    'reservation_created': 'Reservation created',
    'reservation_updated': 'Reservation updated',
    'reservation_deleted': 'Reservation deleted',
    'customer_created': 'Customer created',
    'customer_updated': 'Customer updated',
    'customer_deleted': 'Customer deleted',
    'room_created': 'Room created',
    'room_updated': 'Room updated',
    'room_deleted': 'Room deleted',
    'user_created': 'User created',
    'user_updated': 'User updated',
    'user_deleted': 'User deleted',
    'import_success': 'Import finished: {added} added, {skipped} skipped',

    # Error messages
    'invalid_credentials': 'Invalid username or password',
    'account_disabled': 'Your account has been disabled. Contact an administrator.',
    'permission_denied': 'You do not have permission for this action',
    'login_required': 'Please log in to access this page',
    'customer_required': 'Customer is required',
    'rooms_required': 'At least one room must be selected',
    'invalid_date_range': 'Check-out date must be after check-in date',
    'negative_amount': 'Total amount cannot be negative',
    'rooms_unavailable': 'The following rooms are already booked for the selected dates: {rooms}',
    'invalid_reference': 'Invalid customer or room reference',
    'reservation_not_found': 'Reservation not found',
    'customer_not_found': 'Customer not found',
    'room_not_found': 'Room not found',
    'user_not_found': 'User not found',
    'room_name_exists': 'A room with this name already exists',
    'room_has_reservations': 'Cannot delete a room that has reservations',
    'customer_has_reservations': 'Cannot delete a customer that has reservations',
    'username_exists': 'A user with this username already exists',
    'invalid_role': 'Role must be one of: admin, staff, manager',
    'cannot_delete_self': 'You cannot delete your own account',
    'cannot_delete_last_admin': 'You cannot delete the last administrator',
    'duplicate_reservation_number': 'Reservation number already allocated, please retry',
    'total_mismatch': 'Submitted total {submitted} does not match computed total {computed}; the computed total was saved',
    'invalid_file_type': 'File type not allowed',

    # Validation messages
    'field_required': '{field} is required',
    'invalid_value': 'Invalid value',
}
