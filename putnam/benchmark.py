import argparse
import concurrent.futures
import csv
import os
from pathlib import Path
from statistics import mean

from putnam.solvers.dpll import DpllSolver
from putnam.utils.generators import chain, pigeonhole, random_ksat, simple_sat
from putnam.utils.memory import MemoryTracker
from putnam.utils.parser import read_cnf
from putnam.utils.timer import Timer

TIMEOUT = 300
RESULTS_DIR = "results"
BENCHMARKS_DIR = "benchmarks"
MAX_CONSECUTIVE_TIMEOUTS = 10

SOLVERS = {
    "dpll": (DpllSolver, [
        ("rescan", "copy"),
        ("rescan", "undo"),
        ("watched", "copy"),
        ("watched", "undo"),
    ]),
}

# family -> list of (instance name, zero-argument loader returning (formula, num_vars))
FAMILIES = {
    "simple": [("simple_3var", simple_sat)],
    "pigeonhole": [(f"php_{n + 1}_{n}", lambda n=n: pigeonhole(n)) for n in (2, 3, 4, 5)],
    "chain": [(f"chain_{n}", lambda n=n: chain(n)) for n in (10, 20, 30, 60)],
    "random3": [(f"uf50_{seed}", lambda seed=seed: random_ksat(50, 213, 3, seed=seed))
                for seed in range(10)],
}

CSV_HEADER = [
    "solver", "folder", "avg_time", "min_time", "max_time",
    "avg_mem", "min_mem", "max_mem", "inconclusive", "failed", "decisions"
]


def _run_instance(SolverClass, formula, num_vars, strategy):
    propagation, backtracking = strategy
    with MemoryTracker() as mem, Timer() as timer:
        solver = SolverClass(formula, num_vars, propagation=propagation, backtracking=backtracking)
        result = solver.solve()

    return result.satisfiable, solver.decisions, timer.elapsed, mem.min_usage, mem.avg_usage, mem.max_usage


def collect_instances(benchmarks_dir=BENCHMARKS_DIR):
    """Generated families plus every *.cnf file, grouped by its parent folder."""
    groups = {family: list(instances) for family, instances in FAMILIES.items()}
    root = Path(benchmarks_dir)
    if not root.is_dir():
        return groups
    for path in sorted(root.rglob("*.cnf")):
        groups.setdefault(path.parent.name, []).append((path.name, lambda p=path: read_cnf(p)))
    return groups


def get_next_csv_path(base_path):
    if not os.path.exists(base_path):
        return base_path
    index = 1
    while True:
        new_path = base_path.replace(".csv", f" ({index}).csv")
        if not os.path.exists(new_path):
            return new_path
        index += 1


def new_folder_stats():
    return {
        "times": [],
        "mems": [],
        "mem_min": float('inf'),
        "mem_max": float('-inf'),
        "inconclusive": 0,
        "failed": 0,
        "consecutive_timeouts": 0,
        "decisions": 0,
        "total": 0,
    }


def summarize(label, folder, data):
    """CSV row for one (solver configuration, folder) pair."""
    avg_decs = data["decisions"] / data["total"] if data["total"] > 0 else 0
    if not data["times"]:
        return [label, folder, "-", "-", "-", "-", "-", "-",
                data["inconclusive"], data["failed"], f"{avg_decs:.2f}"]
    return [
        label,
        folder,
        f"{mean(data['times']):.6f}",
        f"{min(data['times']):.6f}",
        f"{max(data['times']):.6f}",
        f"{mean(data['mems']):.2f}",
        f"{data['mem_min']:.2f}",
        f"{data['mem_max']:.2f}",
        data["inconclusive"],
        data["failed"],
        f"{avg_decs:.2f}",
    ]


def benchmark_all(timeout=TIMEOUT, benchmarks_dir=BENCHMARKS_DIR, results_dir=RESULTS_DIR):
    os.makedirs(results_dir, exist_ok=True)
    groups = collect_instances(benchmarks_dir)
    stats = {}

    csv_path = get_next_csv_path(os.path.join(results_dir, "benchmark.csv"))
    print(f">> Results will be written to: {csv_path}")

    with open(csv_path, "w", newline="") as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(CSV_HEADER)

        with concurrent.futures.ProcessPoolExecutor(max_workers=1) as executor:
            for solver_name, (SolverClass, strategies) in SOLVERS.items():
                for strat in strategies:
                    label = "-".join((solver_name,) + strat)
                    print(f"\n=== {label.upper()} ===")
                    stats[label] = {}

                    for folder, instances in groups.items():
                        folder_stats = stats[label][folder] = new_folder_stats()

                        for idx, (name, load) in enumerate(instances):
                            if folder_stats["consecutive_timeouts"] >= MAX_CONSECUTIVE_TIMEOUTS:
                                print(f">> {MAX_CONSECUTIVE_TIMEOUTS}+ consecutive timeouts in {folder}, "
                                      f"skipping remaining")
                                folder_stats["inconclusive"] += len(instances) - idx
                                folder_stats["total"] += len(instances) - idx
                                break

                            folder_stats["total"] += 1
                            formula, num_vars = load()
                            future = executor.submit(_run_instance, SolverClass, formula, num_vars, strat)

                            try:
                                sat, decs, t_elapsed, min_mem, mem_used, max_mem = future.result(timeout=timeout)
                                folder_stats["decisions"] += decs
                                folder_stats["times"].append(t_elapsed)
                                folder_stats["mems"].append(mem_used)
                                folder_stats["mem_min"] = min(folder_stats["mem_min"], min_mem)
                                folder_stats["mem_max"] = max(folder_stats["mem_max"], max_mem)
                                folder_stats["consecutive_timeouts"] = 0
                                status = "SAT" if sat else "UNSAT"
                            except concurrent.futures.TimeoutError:
                                # the worker keeps running; the pool is only freed when it finishes
                                folder_stats["inconclusive"] += 1
                                folder_stats["consecutive_timeouts"] += 1
                                status = "TIMEOUT"
                                t_elapsed = mem_used = 0.0
                                decs = 0
                            except Exception as e:
                                folder_stats["failed"] += 1
                                folder_stats["consecutive_timeouts"] = 0
                                status = f"ERROR: {e}"
                                t_elapsed = mem_used = 0.0
                                decs = 0

                            print(f"{folder:10} {name:25} {status:<12} "
                                  f"Time: {t_elapsed:9.6f}s Mem(avg): {mem_used:9.2f}KB "
                                  f"Decisions: {decs:<8} (Consecutive TOs: {folder_stats['consecutive_timeouts']})")

                        writer.writerow(summarize(label, folder, folder_stats))
                        csvfile.flush()

    return stats


def print_summary(stats):
    for label, folder_data in stats.items():
        print(f"\n--- Summary for {label.upper()} ---")
        print(f"{'Folder':15} {'AVG(s)':>10} {'MIN(s)':>10} {'MAX(s)':>10} "
              f"{'AVG(KB)':>10} {'MIN(KB)':>10} {'MAX(KB)':>10} "
              f"{'INC':>4} {'FAIL':>5} {'AVG DEC':>8}")
        for folder, data in folder_data.items():
            row = summarize(label, folder, data)
            print(f"{folder:15} {row[2]:>10} {row[3]:>10} {row[4]:>10} "
                  f"{row[5]:>10} {row[6]:>10} {row[7]:>10} "
                  f"{row[8]:>4} {row[9]:>5} {row[10]:>8}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Benchmark the DPLL solver configurations")
    parser.add_argument("--timeout", type=float, default=TIMEOUT, help="Seconds per instance")
    parser.add_argument("--benchmarks", default=BENCHMARKS_DIR, help="Directory searched for *.cnf files")
    parser.add_argument("--results", default=RESULTS_DIR, help="Output directory for the CSV")
    args = parser.parse_args(argv)

    stats = benchmark_all(args.timeout, args.benchmarks, args.results)
    print_summary(stats)


if __name__ == "__main__":
    main()
