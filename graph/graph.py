# graph/graph.py
from langgraph.graph import StateGraph, END
from graph.state import AutofillState


def route_after_credential(state: AutofillState) -> str:
    if state["action_taken"] == "error":
        return "notify"
    return "scan"


def route_after_scan(state: AutofillState) -> str:
    if state["action_taken"] in ("error", "nothing_missing", "scanned"):
        return "notify"
    return "fill"


def build_graph(
    resolver=None,
    engine=None,
    orchestrator=None,
    notifier=None,
    wait=None,
    config=None,
):
    """LangGraphのグラフを構築して返す

    各ノード関数はサービス依存を持つため、functools.partialでラップして
    LangGraphが期待する (state) -> dict シグネチャに合わせる。
    引数を省略した場合もグラフ自体は構築できる（テスト用）。
    """
    from functools import partial
    from graph.nodes.credential_node import credential_node
    from graph.nodes.scan_node import scan_node
    from graph.nodes.fill_node import fill_node
    from graph.nodes.notify_node import notify_node

    credential_wrapped = partial(
        credential_node, resolver=resolver, wait=wait, settings=config
    )
    scan_wrapped = partial(scan_node, engine=engine)
    fill_wrapped = partial(fill_node, orchestrator=orchestrator)
    notify_wrapped = partial(notify_node, notifier=notifier)

    workflow = StateGraph(AutofillState)

    workflow.add_node("credential", credential_wrapped)
    workflow.add_node("scan", scan_wrapped)
    workflow.add_node("fill", fill_wrapped)
    workflow.add_node("notify", notify_wrapped)

    workflow.set_entry_point("credential")

    workflow.add_conditional_edges(
        "credential",
        route_after_credential,
        {"scan": "scan", "notify": "notify"},
    )
    workflow.add_conditional_edges(
        "scan",
        route_after_scan,
        {"fill": "fill", "notify": "notify"},
    )

    workflow.add_edge("fill", "notify")
    workflow.add_edge("notify", END)

    return workflow.compile()
