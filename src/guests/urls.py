ADMIN_GUESTS_URL = "/api/admin/events/{event_id}/guests"
ADMIN_GUEST_URL = "/api/admin/events/{event_id}/guests/{guest_id}"
ADMIN_SEND_INVITE_URL = "/api/admin/events/{event_id}/guests/{guest_id}/send-invite"

SUBMIT_RSVP_URL = "/api/public/events/{share_token}/rsvps"
