"""
Order Rush Simulation Script

Fires a burst of concurrent menu-site orders at a running server, then
checks that the dashboard statistics account for every accepted order.
Run from project root: python scripts/simulate.py

Author: Equipe Espetinho Maria
Version: 2.0.0
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from decimal import Decimal
from typing import Any

import httpx

# Configuration
API_BASE_URL = "http://localhost:3000"
TOTAL_ORDERS = 50

# Sample data for random orders
FIRST_NAMES = ["Ana", "Bruno", "Carla", "Diego", "Elaine", "Fábio", "Gabriela", "Hugo", "Iara", "João"]
LAST_NAMES = ["Silva", "Souza", "Oliveira", "Santos", "Lima", "Costa", "Pereira", "Almeida"]
DEFAULT_MENU = [
    {"nome": "Espeto de Carne", "preco_unitario": "12.50", "id_categoria": 1, "disponivel": True},
    {"nome": "Espeto de Frango", "preco_unitario": "10.00", "id_categoria": 1, "disponivel": True},
    {"nome": "Espeto de Queijo Coalho", "preco_unitario": "9.00", "id_categoria": 1, "disponivel": True},
    {"nome": "Refrigerante Lata", "preco_unitario": "6.00", "id_categoria": 2, "disponivel": True},
    {"nome": "Água Mineral", "preco_unitario": "4.00", "id_categoria": 2, "disponivel": True},
]


def generate_random_customer() -> dict[str, str]:
    """Generate random customer info."""
    return {
        "cliente": f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}",
        "telefone": f"5561{random.randint(900000000, 999999999)}",
    }


def generate_order_payload(menu: list[dict[str, Any]]) -> dict[str, Any]:
    """Build the body the menu site posts after composing the WhatsApp message."""
    items = []
    for product in random.sample(menu, k=random.randint(1, min(3, len(menu)))):
        items.append({
            "id_produto": product["id"],
            "quantidade": random.randint(1, 4),
            "preco_unitario": str(product["unit_price"]),
        })
    total = sum(Decimal(i["preco_unitario"]) * i["quantidade"] for i in items)
    return {**generate_random_customer(), "itens": items, "valor_total": str(total)}


async def load_menu(client: httpx.AsyncClient) -> list[dict[str, Any]]:
    """Return available products, registering the default menu on an empty catalog."""
    response = await client.get(f"{API_BASE_URL}/api/produtos")
    response.raise_for_status()
    menu = [p for p in response.json() if p["available"]]
    if menu:
        return menu

    print("📋 Empty catalog, registering the default menu...")
    for product in DEFAULT_MENU:
        created = await client.post(f"{API_BASE_URL}/api/produtos", json=product)
        created.raise_for_status()
    response = await client.get(f"{API_BASE_URL}/api/produtos")
    response.raise_for_status()
    return response.json()


async def send_order(
    client: httpx.AsyncClient,
    menu: list[dict[str, Any]],
    order_num: int,
) -> dict[str, Any]:
    """Send one order and time it."""
    payload = generate_order_payload(menu)
    start_time = time.time()

    try:
        response = await client.post(f"{API_BASE_URL}/api/pedidos", json=payload, timeout=30.0)
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 201:
            data = response.json()["data"]
            return {
                "order_num": order_num,
                "success": True,
                "order_id": data.get("id"),
                "total": Decimal(payload["valor_total"]),
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": response.text[:100],
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    """
    Run the order rush and verify the statistics afterwards.

    Args:
        num_orders: Number of orders to send concurrently
    """
    print("=" * 70)
    print("🍢 ORDER RUSH SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    async with httpx.AsyncClient() as client:
        before = (await client.get(f"{API_BASE_URL}/api/estatisticas")).json()
        menu = await load_menu(client)

        start_time = time.time()
        tasks = [send_order(client, menu, i + 1) for i in range(num_orders)]
        results = await asyncio.gather(*tasks)
        total_time = round(time.time() - start_time, 2)

        after = (await client.get(f"{API_BASE_URL}/api/estatisticas")).json()

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print("\n📈 Performance Metrics:")
        print(f"   Average Response: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")

    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    # Verification: the statistics must grow by exactly what was accepted
    expected_count = len(successful)
    expected_revenue = sum((r["total"] for r in successful), Decimal("0"))
    count_delta = after["order_count"] - before["order_count"]
    revenue_delta = (
        Decimal(str(after["revenue"])) - Decimal(str(before["revenue"]))
    ).quantize(Decimal("0.01"))

    print("\n" + "=" * 70)
    print("🔍 STATISTICS VERIFICATION")
    print("=" * 70)
    print(f"   Orders:  +{count_delta} (expected +{expected_count})")
    print(f"   Revenue: +R$ {revenue_delta} (expected +R$ {expected_revenue:.2f})")
    consistent = count_delta == expected_count and revenue_delta == expected_revenue.quantize(Decimal("0.01"))
    print("   ✅ Consistent" if consistent else "   ❌ Mismatch")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "consistent": consistent,
    }


async def check_health() -> bool:
    """Pre-flight check before the rush."""
    async with httpx.AsyncClient() as client:
        try:
            response = await client.get(f"{API_BASE_URL}/health")
        except httpx.HTTPError as e:
            print(f"❌ Server unreachable: {e}")
            return False
    data = response.json()
    print(f"✅ Status: {data.get('status')} | Database: {data.get('database')}")
    return data.get("status") == "operational"


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Order Rush Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()
    API_BASE_URL = args.url.rstrip("/")

    if not asyncio.run(check_health()):
        print("\n❌ Pre-flight check failed. Start the server first.")
        sys.exit(1)

    summary = asyncio.run(run_simulation(args.orders))
    sys.exit(0 if summary["consistent"] else 1)
