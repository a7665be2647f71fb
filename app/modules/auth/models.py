# Supabase Auth
# Identities live in Supabase's auth.users table; this app has no table of its own for them.
# - Self sign-up and password sign-in use a fresh anon client per request
# - Sign-out calls auth.admin.sign_out(jwt) on the shared anon client (get_supabase)
# - Admin create/delete/list use the service-role client (auth.admin)
# - full_name is stored in user_metadata at sign-up and copied into the profile row

"""
Session handling:
- The access token from sign-in is returned in the body and set as the
  ``sb-access-token`` httponly cookie
- Requests authenticate with ``Authorization: Bearer <token>`` or that cookie
- auth.get_user(jwt=...) resolves the token; results are cached briefly in-process

Role and plan are not kept in user_metadata. They are read from the
``profile`` table (see app/modules/profiles/models.py).
"""
