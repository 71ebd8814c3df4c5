"""
escrud Console — Interactive Product Menu
=========================================

Numbered text menu over a ProductIndex. Each action reads its input
lines, calls the index once or twice and prints the outcome; any
escrud error is printed and the menu comes back.
"""

from typing import Callable, Dict, List

from .core import ProductIndex
from .exceptions import EscrudError, InvalidInput
from .models import (
    CategoryMatch,
    NameMatch,
    PriceRange,
    Product,
    ProductUpdate,
    parse_price,
    require_text,
)

MENU = """
=== Main Menu ===
1. Create Product
2. Read Product by ID
3. Read All Products
4. Search Products
5. Update Product
6. Delete Product
7. Exit"""

SEARCH_MENU = """
=== Search Products ===
1. Search by name
2. Search by category
3. Search by price range"""

LIST_LIMIT = 100


def print_product(product: Product, full: bool = True) -> None:
    print(f"\nID: {product.id}")
    print(f"Name: {product.name}")
    if full:
        print(f"Description: {product.description}")
    print(f"Price: ${product.price}")
    print(f"Category: {product.category}")
    if full and product.created_at:
        print(f"Created At: {product.created_at.isoformat()}")


def print_products(products: List[Product], full: bool = False) -> None:
    print(f"\nFound {len(products)} products:")
    for product in products:
        print_product(product, full=full)
        print("---")


class ProductConsole:
    """
    Interactive CRUD session for one product index.

    Example:
        console = ProductConsole(ProductIndex(client, "products"))
        console.run()
    """

    def __init__(self, products: ProductIndex):
        self.products = products
        self._actions: Dict[str, Callable[[], None]] = {
            "1": self.create_product,
            "2": self.read_product,
            "3": self.read_all_products,
            "4": self.search_products,
            "5": self.update_product,
            "6": self.delete_product,
        }

    def create_product(self) -> None:
        print("\n=== Create Product ===")
        name = input("Enter product name: ")
        description = input("Enter product description: ")
        price = parse_price(input("Enter product price: "))
        category = input("Enter product category: ")

        product_id = self.products.create(
            Product(name=name, description=description, price=price, category=category)
        )
        print(f"Product created successfully with ID: {product_id}")

    def read_product(self) -> None:
        print("\n=== Read Product ===")
        product_id = require_text(input("Enter product ID: "), "product id")

        product = self.products.get_by_id(product_id)
        print("\nProduct Details:")
        print_product(product)

    def read_all_products(self) -> None:
        print("\n=== All Products ===")
        print_products(self.products.list_all(LIST_LIMIT))

    def search_products(self) -> None:
        print(SEARCH_MENU)
        choice = input("Select search type: ").strip()

        if choice == "1":
            criterion = NameMatch(require_text(input("Enter product name to search: "), "search term"))
        elif choice == "2":
            criterion = CategoryMatch(require_text(input("Enter category to search: "), "category"))
        elif choice == "3":
            min_price = parse_price(input("Enter minimum price: "), "minimum price")
            max_price = parse_price(input("Enter maximum price: "), "maximum price")
            criterion = PriceRange(min_price, max_price)
        else:
            raise InvalidInput("Invalid search type.")

        print_products(self.products.search(criterion), full=True)

    def update_product(self) -> None:
        print("\n=== Update Product ===")
        product_id = require_text(input("Enter product ID to update: "), "product id")

        current = self.products.get_by_id(product_id)
        print(f"Current product: {current.name} - ${current.price}")

        keep = " (or press Enter to keep current): "
        name = input(f"Enter new product name{keep}").strip()
        description = input(f"Enter new product description{keep}").strip()
        price_text = input(f"Enter new product price{keep}").strip()
        category = input(f"Enter new product category{keep}").strip()

        changes = ProductUpdate(
            name=name or None,
            description=description or None,
            price=parse_price(price_text) if price_text else None,
            category=category or None,
        )
        if changes.is_empty():
            print("Nothing to update.")
            return

        self.products.update(current.id, changes)
        print("Product updated successfully!")

    def delete_product(self) -> None:
        print("\n=== Delete Product ===")
        product_id = require_text(input("Enter product ID to delete: "), "product id")

        confirm = input("Are you sure you want to delete this product? (y/N): ")
        if confirm.strip().lower() != "y":
            print("Deletion cancelled.")
            return

        self.products.delete(product_id)
        print("Product deleted successfully!")

    def run(self) -> None:
        """Loop until the user picks Exit or closes stdin."""
        while True:
            print(MENU)
            try:
                choice = input("Select an option: ").strip()
            except (EOFError, KeyboardInterrupt):
                print("\nGoodbye!")
                return

            if choice == "7":
                print("Goodbye!")
                return

            action = self._actions.get(choice)
            if action is None:
                print("Invalid option. Please try again.")
                continue

            try:
                action()
            except EscrudError as e:
                print(f"Error: {e}")
            except (EOFError, KeyboardInterrupt):
                print("\nGoodbye!")
                return
