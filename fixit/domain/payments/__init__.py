"""Payment domain - Payment records kept alongside bookings"""
