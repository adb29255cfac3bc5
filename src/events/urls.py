ADMIN_EVENTS_URL = "/api/admin/events"
ADMIN_EVENT_URL = "/api/admin/events/{event_id}"

PUBLIC_EVENT_URL = "/api/public/events/{share_token}"
PUBLIC_EVENT_ACCESS_URL = "/api/public/events/{share_token}/access"
