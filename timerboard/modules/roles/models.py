# Supabase tables: guild_roles, user_role_memberships
# Both tables are owned by the Discord sync feed and are read-only here.

"""
Expected Supabase table structure:

guild_roles:
- guild_id: bigint (not null)
- role_id: bigint (primary key)
- name: text (not null)
- color: text (default: '#99aab5')
- position: smallint (default: 0)

user_role_memberships:
- user_id: bigint (foreign key to users.id, on delete cascade)
- role_id: bigint (foreign key to guild_roles.role_id, on delete cascade)
- unique constraint on (user_id, role_id)

The sync feed replaces a user's memberships wholesale (delete all, then insert).
"""
