"""
Benchmark strategies over many seeded headless games.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field

import numpy as np
from tqdm import trange

from agent2048.agent import SimulationResult, run_simulation
from agent2048.strategies import STRATEGIES, Strategy, create_strategy

# ##>: Module logger.
_logger = logging.getLogger(__name__)


@dataclass
class BenchmarkConfig:
    """
    Configuration of a benchmark.

    Attributes
    ----------
    strategies : list[str]
        Registry identifiers to compare.
    runs : int
        Games per strategy.
    seed_start : int
        Seed of the first game; game ``i`` uses ``seed_start + i`` for every strategy.
    max_moves : int
        Safety limit on moves per game.
    size : int
        Board dimension.
    win_tile : int
        Tile that counts as a win.
    """

    strategies: list[str] = field(default_factory=lambda: list(STRATEGIES))
    runs: int = 10
    seed_start: int = 0
    max_moves: int = 10_000
    size: int = 4
    win_tile: int = 2048

    def __post_init__(self):
        if self.runs < 1:
            raise ValueError(f'runs must be positive, got {self.runs}')
        self.strategies = [name.lower() for name in self.strategies]


@dataclass
class StrategyStats:
    """Aggregated results of one strategy."""

    strategy: str
    name: str
    runs: int
    avg_score: float
    median_score: float
    min_score: int
    max_score: int
    std_score: float
    avg_moves: float
    median_moves: float
    min_moves: int
    max_moves: int
    avg_max_tile: float
    median_max_tile: float
    min_max_tile: int
    max_max_tile: int
    max_tile_distribution: dict[int, int]
    win_rate: float
    game_over_rate: float
    avg_duration: float
    total_duration: float


def aggregate(key: str, name: str, results: list[SimulationResult]) -> StrategyStats:
    """
    Aggregate the games of one strategy.

    Parameters
    ----------
    key : str
        Registry identifier of the strategy.
    name : str
        Display name of the strategy.
    results : list[SimulationResult]
        One result per game, at least one.

    Returns
    -------
    StrategyStats
        Means, medians, extremes and rates over the games.
    """
    scores = np.array([result.score for result in results])
    moves = np.array([result.moves for result in results])
    tiles = np.array([result.max_tile for result in results])
    durations = np.array([result.duration for result in results])

    return StrategyStats(
        strategy=key,
        name=name,
        runs=len(results),
        avg_score=float(scores.mean()),
        median_score=float(np.median(scores)),
        min_score=int(scores.min()),
        max_score=int(scores.max()),
        std_score=float(scores.std()),
        avg_moves=float(moves.mean()),
        median_moves=float(np.median(moves)),
        min_moves=int(moves.min()),
        max_moves=int(moves.max()),
        avg_max_tile=float(tiles.mean()),
        median_max_tile=float(np.median(tiles)),
        min_max_tile=int(tiles.min()),
        max_max_tile=int(tiles.max()),
        max_tile_distribution=dict(sorted(Counter(int(tile) for tile in tiles).items())),
        win_rate=sum(result.is_win for result in results) / len(results),
        game_over_rate=sum(result.is_game_over for result in results) / len(results),
        avg_duration=float(durations.mean()),
        total_duration=float(durations.sum()),
    )


def build_strategy(name: str, seed: int) -> Strategy:
    """Fresh strategy for one game, drawing its random numbers from the game seed when it uses any."""
    strategy_class = STRATEGIES.get(name)
    if strategy_class is not None and strategy_class.seeded:
        return create_strategy(name, seed=seed)
    return create_strategy(name)


def benchmark(config: BenchmarkConfig | None = None) -> list[StrategyStats]:
    """
    Play ``config.runs`` games with every strategy.

    Parameters
    ----------
    config : BenchmarkConfig, optional
        Benchmark configuration, defaults to every registered strategy.

    Returns
    -------
    list[StrategyStats]
        One entry per strategy, in the configured order.
    """
    config = config or BenchmarkConfig()
    stats = []

    for name in config.strategies:
        strategy = create_strategy(name)
        results = []

        with trange(config.runs) as period:
            for num in period:
                # ##: Play a game.
                seed = config.seed_start + num
                result = run_simulation(
                    build_strategy(strategy.key, seed),
                    seed=seed,
                    size=config.size,
                    max_moves=config.max_moves,
                    win_tile=config.win_tile,
                )
                results.append(result)

                # ##: Log.
                period.set_description(f'{strategy.name}: {num + 1}')
                period.set_postfix(score=result.score, max=result.max_tile)

        stats.append(aggregate(strategy.key, strategy.name, results))
        _logger.info('%s: avg score %.0f, win rate %.0f%%', strategy.name, stats[-1].avg_score, stats[-1].win_rate * 100)

    return stats


def summarize(stats: list[StrategyStats]) -> dict[str, str]:
    """
    Name the best strategy for each headline metric.

    Parameters
    ----------
    stats : list[StrategyStats]
        Benchmark results.

    Returns
    -------
    dict[str, str]
        Strategy name per metric: ``score``, ``win_rate``, ``moves`` and ``speed``. Empty when ``stats`` is.
    """
    if not stats:
        return {}
    return {
        'score': max(stats, key=lambda item: item.avg_score).name,
        'win_rate': max(stats, key=lambda item: item.win_rate).name,
        'moves': max(stats, key=lambda item: item.avg_moves).name,
        'speed': min(stats, key=lambda item: item.avg_duration).name,
    }


def format_table(stats: list[StrategyStats]) -> str:
    """Render the results as a plain-text table."""
    header = f'{"Strategy":<20}{"Avg score":>12}{"Max score":>12}{"Avg moves":>12}{"Best tile":>12}{"Win rate":>10}'
    lines = [header, '-' * len(header)]
    for item in stats:
        lines.append(
            f'{item.name:<20}{item.avg_score:>12.0f}{item.max_score:>12}{item.avg_moves:>12.0f}'
            f'{item.max_max_tile:>12}{item.win_rate:>10.0%}'
        )
    return '\n'.join(lines)


def main(argv: list[str] | None = None) -> None:
    """Command-line entry point."""
    from argparse import ArgumentParser

    parser = ArgumentParser(description='Benchmark 2048 strategies.')
    parser.add_argument('--strategy', nargs='+', default=list(STRATEGIES), help='strategy identifiers')
    parser.add_argument('--runs', type=int, default=10)
    parser.add_argument('--seed', type=int, default=0)
    parser.add_argument('--max-moves', type=int, default=10_000)
    parser.add_argument('--log-level', default='WARNING', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    stats = benchmark(
        BenchmarkConfig(strategies=args.strategy, runs=args.runs, seed_start=args.seed, max_moves=args.max_moves)
    )
    print(format_table(stats))
    for metric, name in summarize(stats).items():
        print(f'Best by {metric}: {name}')


if __name__ == '__main__':
    main()
