import json, argparse
import os

from kenya_app.edge_cases import EDGE_CASE_SUITE, EdgeCaseRunner
from kenya_app.governance import ComplianceGate
from kenya_app.orchestrator import ConversationOrchestrator


def summarize(results):
    """ Aggregate pass counts over a list of TestResult. """
    passed = sum(1 for r in results if r.passed)
    return {
        "tests": len(results),
        "passed": passed,
        "failed": len(results) - passed,
        "pass_rate": (passed / len(results)) if results else 0.0,
        "results": [r.model_dump(mode="json") for r in results],
    }


def evaluate(orchestrator=None, only=None):
    """ Run the edge-case suite (optionally a subset by name) and summarize.
        The compliance report of the canonical configuration is included so a
        blocked run can be told apart from model behaviour.
    """
    orchestrator = orchestrator or ConversationOrchestrator()
    suite = [t for t in EDGE_CASE_SUITE if not only or t.name in only]

    report = ComplianceGate(orchestrator.flags).validate(orchestrator.registry.canonical_config)
    results = EdgeCaseRunner(orchestrator, suite=suite, sink=orchestrator.sink).run()

    out = summarize(results)
    out["compliance"] = report.overall_status
    return out


if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="Run the adversarial edge-case suite against the configured backend. " \
    "Tests run sequentially in declaration order.")
    ap.add_argument("--only", nargs="*", default=None,
                    help="Names of the tests to run (default: all).")
    ap.add_argument("--out", default="./eval/runs/edge_cases.json", type=str,
                    help="Where to write the JSON results.")
    args = ap.parse_args()

    out = evaluate(only=args.only)
    print(json.dumps(out, indent=2))

    """ Save results to a file """
    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(out, f, indent=2)
