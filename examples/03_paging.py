"""
Example 03: Paging and Transactions

This example demonstrates paged reads with totals, skip/take, and transactions
that roll back on errors.
"""

import sqlite3
from dataclasses import dataclass

from sqlalchemy import column, delete, insert, select

from row_bridge import Database, DatabaseBackend, table_for, table_name, values_for


@table_name("products")
@dataclass
class Product:
    id: int
    name: str
    price: float


def main():
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE products (id INTEGER PRIMARY KEY, name TEXT, price REAL)")
    db = Database(conn, DatabaseBackend.SQLITE)

    products = table_for(Product)
    for i in range(1, 24):
        db.execute(insert(products).values(values_for(Product(0, f"Product {i}", i * 1.5))))

    print("=== Paging ===\n")

    query = select().where(column("price") > 3).order_by(column("id"))
    page = db.page(Product, 2, 5, query)
    print(f"Page {page.current_page}/{page.total_pages} ({page.total_items} items):")
    for product in page.items:
        print(f"  - {product.name}: {product.price}")

    cheapest = db.skip_take(Product, 0, 3, select().order_by(column("price")))
    print(f"\nCheapest three: {[p.name for p in cheapest]}\n")

    print("=== Transactions ===\n")
    try:
        with db.transaction():
            db.execute(delete(products))
            raise RuntimeError("Simulated failure")
    except RuntimeError as e:
        print(f"Rolled back: {e}")

    highest = db.execute_scalar(select(column("id")).select_from(products).order_by(column("id").desc()))
    print(f"Highest id after rollback: {highest}")

    conn.close()


if __name__ == "__main__":
    main()
