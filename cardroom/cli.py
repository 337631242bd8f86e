"""
Cardroom CLI - Command-line interface for the service.

Usage:
    cardroom serve [--host H] [--port P]      Run the HTTP API
    cardroom demo [--players N] [--game G]    Play a blackjack hand in the terminal
    cardroom deck-types                       List supported deck types
"""

import argparse
import logging
import sys

from . import config

logger = logging.getLogger(__name__)

# Demo players draw until they reach this total
DEMO_STAND_ON = 17


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Cardroom - Multiplayer card table service",
        prog="cardroom",
    )
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="DEBUG, INFO, WARNING or ERROR")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=config.HOST, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=config.PORT, help="Bind port")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Play one blackjack hand")
    demo_parser.add_argument("--players", type=int, default=2, help="Number of players (1-6)")
    demo_parser.add_argument("--decks", type=int, default=1, help="Number of decks")
    demo_parser.add_argument(
        "--game", choices=["blackjack", "glitchjack"], default="blackjack", help="Variant to play"
    )

    subparsers.add_parser("deck-types", help="List supported deck types")

    args = parser.parse_args(argv)
    config.configure_logging(args.log_level)

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "demo":
        cmd_demo(args)
    elif args.command == "deck-types":
        cmd_deck_types(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the API under uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    logger.info("Starting cardroom API on %s:%d (%s)", args.host, args.port, config.CARDROOM_ENV)
    uvicorn.run(
        "cardroom.api.app:app",
        host=args.host,
        port=args.port,
        log_level=logging.getLevelName(config.parse_log_level(args.log_level)).lower(),
    )


def cmd_demo(args):
    """Play a full hand with simple players that stand on 17."""
    from .api.service import GameService
    from .engine_core.state import GameType
    from .games import glitchjack_hand_value, hand_value

    game_type = GameType.parse(args.game)
    if game_type == GameType.GLITCHJACK:
        value_of = glitchjack_hand_value
    else:
        value_of = lambda cards: hand_value(cards)[0]

    service = GameService()
    if game_type == GameType.GLITCHJACK:
        game = service.create_glitchjack_game(num_decks=args.decks)
    else:
        game = service.create_game(num_decks=args.decks)
    print(f"Game {game.game_id} ({game_type.value}, deck '{game.deck.name}')")

    for i in range(max(1, min(args.players, game.max_players))):
        service.add_player(game.game_id, f"Player {i + 1}")

    result = service.start_game(game.game_id)
    if not result.success:
        print(f"Error: {result.error}")
        sys.exit(1)

    for player in game.players:
        while not player.busted and value_of(player.hand) < DEMO_STAND_ON:
            result = service.hit(game.game_id, player.player_id)
            if not result.success:
                print(f"Error: {result.error}")
                sys.exit(1)
            print(f"{player.name} draws {result.card}")
        # Glitchjack moves past a busted player by itself; blackjack needs the stand
        if game_type == GameType.BLACKJACK or not player.busted:
            service.stand(game.game_id, player.player_id)
        hand = ", ".join(str(card) for card in player.hand)
        print(f"{player.name}: {hand} = {value_of(player.hand)}")

    dealer_hand = ", ".join(str(card) for card in game.dealer.hand)
    print(f"Dealer: {dealer_hand} = {value_of(game.dealer.hand)}")

    result = service.get_results(game.game_id)
    if not result.success:
        print(f"Error: {result.error}")
        sys.exit(1)
    print("\nResults:")
    for player in game.players:
        print(f"  {player.name}: {result.data['results'][player.player_id].value}")


def cmd_deck_types(args):
    """List supported deck types."""
    from .engine_core.cards import DeckType

    for deck_type in DeckType:
        print(f"{deck_type.value:<10} {deck_type.cards_per_deck:>3} cards  {deck_type.description}")


if __name__ == "__main__":
    main()
