"""
Example 01: Basic Query Conversion

This example demonstrates compiling SQLAlchemy Core statements into row-bridge Sql
for different compilers, and how placeholders are rewritten.
"""

from sqlalchemy import column, delete, select, table, update

from row_bridge import CompilerType, to_sql
from row_bridge.core import settings


def main():
    print("=== Basic Query Conversion ===\n")

    query = (
        select()
        .select_from(table("Users"))
        .where(column("Active") == 1)
        .where(column("Name").like("A%"))
    )

    # Default compiler (SQL Server): positional ? becomes :p0, :p1, ...
    sql = to_sql(query)
    print(f"Default compiler:\n  {sql.sql}")
    print(f"  args={sql.args} params={sql.params}\n")

    # Pick a compiler per call
    for compiler_type in (CompilerType.MYSQL, CompilerType.POSTGRES, CompilerType.SQLITE):
        sql = to_sql(query, compiler_type)
        print(f"{compiler_type.value}:\n  {sql.sql}\n")

    # Or change the process-wide default
    settings.set_default_compiler_type(CompilerType.POSTGRES)
    print(f"New default: {to_sql(query).sql}\n")

    # Write statements convert the same way
    users = table("Users", column("Name"))
    statement = update(users).where(column("Id") == 7).values(Name="Alice")
    print(f"UPDATE: {to_sql(statement)} {to_sql(statement).args}")
    print(f"DELETE: {to_sql(delete(users).where(column('Id') == 7))}")

    settings.reset()


if __name__ == "__main__":
    main()
