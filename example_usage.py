# examples/complete_usage.py
"""
PolyDoc usage example: models from dicts and from classes
"""

import asyncio
from datetime import datetime

from polydoc import create_odm, type as t


# 1. Initialize the mapper (no I/O yet)
odm = create_odm({
    "db": "blog",
    "enforce_extra": "remove",
})


# 2. Define models
User = odm.create_model("users", {
    "id": t.string(),
    "email": t.string(),
    "joined": datetime,
}, {"enforce_missing": True})


@odm.adapt_named_class("posts")
class Post:
    schema = {
        "id": str,
        "author": str,
        "parent": str,
        "title": str,
        "tags": [str],
    }
    index = [
        "author",
        ("path", lambda doc: [doc("parent"), doc("id")]),
    ]

    def init(self):
        self.setdefault("tags", [])

    def pre_save(self):
        self["title"] = self["title"].strip()

    def headline(self):
        return self["title"].upper()

    @staticmethod
    def by_author(author):
        return Post.filter(author=author)


async def main():
    # 3. Create the database, collections and indexes
    await odm.open()

    # 4. Documents
    ada = await User({"email": "ada@example.com", "joined": datetime.utcnow()}).save()
    post = await Post({"author": ada["id"], "parent": "root", "title": "  Hello  "}).save()
    print(post.headline())

    # 5. Queries
    posts = await Post.by_author(ada["id"]).order_by("title").take(10).run()
    print(f"{len(posts)} post(s) by {ada['email']}")

    await odm.close()


if __name__ == "__main__":
    asyncio.run(main())
