GUEST_URL = "/api/guest"
RSVP_URL = "/api/rsvp"
ADMIN_GUESTS_URL = "/api/admin/guests"
ADMIN_GUEST_URL = "/api/admin/guests/{guest_id}"
ADMIN_SUMMARY_URL = "/api/admin/guests/summary"
