"""
In-memory implementation of UserService served through the generated router.

Generate the router first:
    svcgen generate examples/users/users.svc -t http -t openapi --out examples/users/generated

Then run:
    uvicorn app:app --app-dir examples/users --reload
"""

import sys
from pathlib import Path

from servicegen import Context, Failure, Success

sys.path.insert(0, str(Path(__file__).parent / "generated"))

from user_service_http import create_app  # noqa: E402

# PNG signature; enough for clients sniffing the content type
AVATAR = b"\x89PNG\r\n\x1a\n"


class UserService:
    def __init__(self):
        self.users = {}
        self.counter = 0

    def create_user(self, ctx: Context, name, email):
        if "@" not in email:
            return Failure({"code": "invalid_email", "message": f"'{email}' is not an email address"})
        self.counter += 1
        user = {"id": str(self.counter), "name": name, "email": email, "tags": []}
        if ctx.user_id:
            user["tags"].append(f"created-by:{ctx.user_id}")
        self.users[user["id"]] = user
        return Success(user)

    def get_user(self, id):
        return self.users.get(id)

    def list_users(self, limit=20, tag=None):
        users = [u for u in self.users.values() if tag is None or tag in u["tags"]]
        return users[:limit]

    def update_user(self, id, name=None, email=None):
        user = self.users.get(id)
        if user is None:
            return Failure({"code": "not_found", "message": f"No user {id}"})
        if name is not None:
            user["name"] = name
        if email is not None:
            user["email"] = email
        return Success(user)

    def delete_user(self, id):
        self.users.pop(id, None)

    async def avatar(self, user):
        return AVATAR

    async def ping(self, ctx: Context):
        return f"pong ({ctx.request_id})"

    def reset(self):
        count = len(self.users)
        self.users.clear()
        return count


app = create_app(UserService())
