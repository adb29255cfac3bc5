ACCESS_URL = "/api/access"
ADMIN_TOKEN_URL = "/api/admin/token"
