from datetime import datetime


def print_summary(sent: int, magazines_sent: int, skipped: int) -> None:
    """Print flush summary."""
    print(f"\n{'=' * 60}")
    print(f"[{datetime.now()}] Flush Complete!")
    print(f"{'=' * 60}")
    print(f"✓ Articles notified: {sent}")
    print(f"✓ Magazines notified: {magazines_sent}")
    print(f"⊘ Skipped: {skipped}")
    print(f"{'=' * 60}\n")
