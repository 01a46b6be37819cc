"""
Example 02: Model Mapping

This example demonstrates how mapping conventions drive table and column names,
and reading rows back into dataclasses and Pydantic models.
"""

import sqlite3
from dataclasses import dataclass
from typing import Annotated

from pydantic import BaseModel
from sqlalchemy import column, insert, select

from row_bridge import (
    Column,
    Database,
    DatabaseBackend,
    ResultColumn,
    UnderscoreMapper,
    generate_select,
    table_for,
    table_name,
    to_sql,
    values_for,
)


@dataclass
class UserProfile:
    id: int
    DisplayName: str
    EmailAddress: str
    PostCount: Annotated[int, ResultColumn()] = 0


@table_name("blog_posts")
class Post(BaseModel):
    id: int
    AuthorID: Annotated[int, Column("author_id")]
    Title: str


def main():
    mapper = UnderscoreMapper()
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE user_profile (id INTEGER PRIMARY KEY, display_name TEXT, email_address TEXT)")
    conn.execute("CREATE TABLE blog_posts (id INTEGER PRIMARY KEY, author_id INTEGER, title TEXT)")

    print("=== Model Mapping ===\n")

    # Generated SELECT: columns and table come from the class
    print(f"Generated: {to_sql(generate_select(select(), UserProfile, mapper))}\n")

    db = Database(conn, DatabaseBackend.SQLITE, default_mapper=mapper)

    # Inserts from objects (auto-increment primary key is skipped)
    for name in ("Alice", "Bob"):
        profile = UserProfile(0, name, f"{name.lower()}@example.com")
        db.execute(insert(table_for(UserProfile, mapper)).values(values_for(profile, mapper)))
    db.execute(insert(table_for(Post, mapper)).values(values_for(Post(id=0, AuthorID=1, Title="Hello"), mapper)))

    # Typed reads
    for profile in db.query(UserProfile, select().order_by(column("id"))):
        print(f"  - {profile}")

    post = db.single(Post, select().where(column("author_id") == 1))
    print(f"\nPost by author 1: {post}")

    bob = db.first_or_default(UserProfile, select().where(column("display_name") == "Bob"))
    print(f"Bob: {bob}")

    conn.close()


if __name__ == "__main__":
    main()
