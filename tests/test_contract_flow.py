"""Contract flow extraction tests."""

from __future__ import annotations

from conftest import assert_integrity, edge_labels_from, node_by_label

from flowdoc.core import NodeKind
from flowdoc.parser import LABEL_MAX_CHARS


def _dead_ends(graph):
    """Nodes without outgoing edges."""
    return {n.kind for n in graph.nodes if not graph.edges_from(n.id)}


def test_minimal_contract_has_three_nodes_and_two_edges(contract_flow):
    artifact = contract_flow(
        """
        export const add = define('cart.add', {
          pre: [],
          transition: (s, i) => ({ ...s, items: [...s.items, i] }),
        });
        """
    )
    graph = artifact.graph

    assert_integrity(graph)
    assert [n.label for n in graph.nodes] == ["start", "ok", "transition"]
    assert len(graph.edges) == 2
    assert artifact.summary.step_count == 1
    assert artifact.summary.branch_count == 0

    transition = node_by_label(graph, "transition")
    ok = node_by_label(graph, "ok")
    (out,) = graph.edges_from(transition.id)
    assert out.to_id == ok.id
    assert out.label == "({ ...s, items: [...s.items, i] })"


def test_precondition_with_tag(contract_flow):
    graph = contract_flow(
        """
        const remove = define('cart.remove', {
          pre: [(s) => s.exists ? pass : err({ tag: 'CartNotFound' })],
          transition: (s) => s,
        });
        """
    ).graph

    assert_integrity(graph)
    (pre,) = graph.nodes_of_kind(NodeKind.PRECONDITION)
    assert pre.label == "pre.1"

    error = node_by_label(graph, "error: CartNotFound")
    transition = node_by_label(graph, "transition")
    assert error.kind == NodeKind.ERROR
    targets = {e.label: e.to_id for e in graph.edges_from(pre.id)}
    assert targets == {"fail": error.id, "pass": transition.id}


def test_precondition_without_tag_gets_generic_error(contract_flow):
    graph = contract_flow(
        """
        define('cart.checkout', {
          pre: [(s) => s.items.length > 0],
          transition: (s) => s,
        });
        """
    ).graph

    error = node_by_label(graph, "error(pre.1)")
    pre = node_by_label(graph, "pre.1")
    assert [(e.from_id, e.label) for e in graph.edges_to(error.id)] == [(pre.id, "fail")]


def test_preconditions_chain_through_pass_edges(contract_flow):
    graph = contract_flow(
        """
        define('cart.pay', {
          pre: [
            // cart must exist
            (s) => s ? pass : err({ tag: 'Missing' }),
            (s) => s.total > 0 ? pass : err({ tag: 'Empty' }),
          ],
          transition: (s) => s,
        });
        """
    ).graph

    start = node_by_label(graph, "start")
    pre1 = node_by_label(graph, "pre.1")
    pre2 = node_by_label(graph, "pre.2")
    transition = node_by_label(graph, "transition")

    assert [e.to_id for e in graph.edges_from(start.id)] == [pre1.id]
    assert [(e.from_id, e.label) for e in graph.edges_to(pre2.id)] == [(pre1.id, "pass")]
    assert [(e.from_id, e.label) for e in graph.edges_to(transition.id)] == [(pre2.id, "pass")]
    assert len(graph.nodes_of_kind(NodeKind.PRECONDITION)) == 2


def test_distinct_tags_each_get_an_error_node(contract_flow):
    artifact = contract_flow(
        """
        define('cart.ship', {
          pre: [
            (s) => !s.address
              ? err({ tag: 'NoAddress' })
              : s.blocked
                ? err({ tag: 'Blocked' })
                : !s.zip
                  ? err({ tag: 'NoAddress' })
                  : pass,
          ],
          transition: (s) => s,
        });
        """
    )
    errors = [n.label for n in artifact.graph.nodes_of_kind(NodeKind.ERROR)]

    assert errors == ["error: NoAddress", "error: Blocked"]
    assert artifact.summary.error_path_count == 2
    pre = node_by_label(artifact.graph, "pre.1")
    assert edge_labels_from(artifact.graph, pre.id) == ["fail", "fail", "pass"]


def test_if_else_with_returns(contract_flow):
    graph = contract_flow(
        """
        define('cart.deliver', {
          pre: [],
          transition: (s, i) => {
            if (i.express) {
              return { ...s, fast: true };
            } else {
              return s;
            }
          },
        });
        """
    ).graph

    assert_integrity(graph)
    (decision,) = graph.nodes_of_kind(NodeKind.DECISION)
    assert decision.label == "if i.express"

    out = {e.label: graph.get_node(e.to_id) for e in graph.edges_from(decision.id)}
    assert set(out) == {"true", "false"}
    assert out["true"].label == "return { ...s, fast: true }"
    assert out["false"].label == "return s"

    ok = node_by_label(graph, "ok")
    assert {e.from_id for e in graph.edges_to(ok.id)} == {out["true"].id, out["false"].id}
    transition = node_by_label(graph, "transition")
    assert [e.label for e in graph.edges_from(transition.id)] == [None]


def test_if_without_else_bypasses_on_false(contract_flow):
    graph = contract_flow(
        """
        define('cart.audit', {
          pre: [],
          transition: (s) => {
            if (s.flagged) {
              log(s);
            }
            return s;
          },
        });
        """
    ).graph

    decision = node_by_label(graph, "if s.flagged")
    log = node_by_label(graph, "log(s);")
    ret = node_by_label(graph, "return s")

    assert {(e.from_id, e.label) for e in graph.edges_to(ret.id)} == {(log.id, None), (decision.id, "false")}
    assert [(e.from_id, e.label) for e in graph.edges_to(log.id)] == [(decision.id, "true")]


def test_else_if_nests_decisions(contract_flow):
    artifact = contract_flow(
        """
        define('cart.rate', {
          pre: [],
          transition: (s) => {
            if (s.vip) {
              return 1;
            } else if (s.member) {
              return 2;
            }
            return 3;
          },
        });
        """
    )
    labels = [n.label for n in artifact.graph.nodes_of_kind(NodeKind.DECISION)]

    assert labels == ["if s.vip", "if s.member"]
    assert artifact.summary.branch_count == 2
    inner = node_by_label(artifact.graph, "if s.member")
    outer = node_by_label(artifact.graph, "if s.vip")
    assert [(e.from_id, e.label) for e in artifact.graph.edges_to(inner.id)] == [(outer.id, "false")]


def test_while_loop_back_edge_and_single_done(contract_flow):
    artifact = contract_flow(
        """
        define('queue.drain', {
          pre: [],
          transition: (s) => {
            while (s.pending) {
              doWork(s);
            }
            return s;
          },
        });
        """
    )
    graph = artifact.graph

    assert_integrity(graph)
    (loop,) = graph.nodes_of_kind(NodeKind.LOOP)
    assert loop.label == "while s.pending"
    body = node_by_label(graph, "doWork(s);")

    out = graph.edges_from(loop.id)
    assert sorted(e.label for e in out) == ["done", "iterate"]
    assert [e.label for e in out].count("done") == 1
    assert [(e.to_id, e.label) for e in graph.edges_from(body.id)] == [(loop.id, "next")]

    done = [e for e in out if e.label == "done"][0]
    assert graph.get_node(done.to_id).label == "return s"
    assert artifact.summary.branch_count == 1


def test_loop_labels(contract_flow):
    graph = contract_flow(
        """
        define('cart.total', {
          pre: [],
          transition: (s) => {
            for (let i = 0; i < s.items.length; i++) {
              touch(i);
            }
            for (const item of s.items) {
              add(item);
            }
            for (const key in s.index) {
              check(key);
            }
            do {
              tick();
            } while (s.running);
          },
        });
        """
    ).graph

    labels = [n.label for n in graph.nodes_of_kind(NodeKind.LOOP)]
    assert labels == ["for (...)", "for-of s.items", "for-in s.index", "do-while s.running"]

    # loops run one after another through their done exits
    loops = graph.nodes_of_kind(NodeKind.LOOP)
    for (prev, nxt) in zip(loops, loops[1:]):
        assert (prev.id, "done") in {(e.from_id, e.label) for e in graph.edges_to(nxt.id)}


def test_return_inside_loop_reaches_end(contract_flow):
    graph = contract_flow(
        """
        define('cart.find', {
          pre: [],
          transition: (s, i) => {
            for (const item of s.items) {
              if (item.id === i.id) {
                return item;
              }
            }
            return null;
          },
        });
        """
    ).graph

    ok = node_by_label(graph, "ok")
    sources = {graph.get_node(e.from_id).label for e in graph.edges_to(ok.id)}
    assert sources == {"return item", "return null"}

    loop = node_by_label(graph, "for-of s.items")
    decision = node_by_label(graph, "if item.id === i.id")
    assert (decision.id, "false") in {(e.from_id, e.label) for e in graph.edges_to(loop.id)}


def test_throw_terminates_path(contract_flow):
    artifact = contract_flow(
        """
        define('cart.lock', {
          pre: [],
          transition: (s) => {
            if (!s.open) {
              throw new Error('closed');
            }
            return { ...s, locked: true };
          },
        });
        """
    )
    graph = artifact.graph

    thrown = node_by_label(graph, "throw new Error('closed')")
    assert thrown.kind == NodeKind.ERROR
    assert graph.edges_from(thrown.id) == []
    assert _dead_ends(graph) == {NodeKind.END, NodeKind.ERROR}


def test_statements_after_return_are_not_walked(contract_flow):
    graph = contract_flow(
        """
        define('cart.noop', {
          pre: [],
          transition: (s) => {
            return s;
            cleanup();
          },
        });
        """
    ).graph

    assert [n.label for n in graph.nodes if n.label.startswith("cleanup")] == []


def test_switch_becomes_one_unsupported_node(contract_flow):
    artifact = contract_flow(
        """
        define('cart.route', {
          pre: [],
          transition: (s, i) => {
            switch (i.kind) {
              case 'a':
                return s;
              default:
                return s;
            }
          },
        });
        """
    )
    graph = artifact.graph

    (unsupported,) = graph.nodes_of_kind(NodeKind.UNSUPPORTED)
    assert unsupported.label == "unsupported: switch_statement"
    assert artifact.summary.unsupported_count >= 1
    ok = node_by_label(graph, "ok")
    assert [e.to_id for e in graph.edges_from(unsupported.id)] == [ok.id]
    assert [n for n in graph.nodes if n.label.startswith("return")] == []


def test_try_break_continue_are_unsupported(contract_flow):
    graph = contract_flow(
        """
        define('cart.retry', {
          pre: [],
          transition: (s) => {
            try {
              s = load(s);
            } catch (e) {
              s = fallback(s);
            }
            while (s.busy) {
              if (s.skip) {
                continue;
              }
              break;
            }
            return s;
          },
        });
        """
    ).graph

    labels = sorted(n.label for n in graph.nodes_of_kind(NodeKind.UNSUPPORTED))
    assert labels == [
        "unsupported: break_statement",
        "unsupported: continue_statement",
        "unsupported: try_statement",
    ]
    assert_integrity(graph)


def test_non_function_transition_is_unsupported(contract_flow):
    artifact = contract_flow(
        """
        define('cart.apply', {
          pre: [],
          transition: applyChanges,
        });
        """
    )
    graph = artifact.graph

    unsupported = node_by_label(graph, "unsupported: transition is not function-like")
    transition = node_by_label(graph, "transition")
    ok = node_by_label(graph, "ok")
    assert [e.from_id for e in graph.edges_to(unsupported.id)] == [transition.id]
    assert [e.to_id for e in graph.edges_from(unsupported.id)] == [ok.id]
    assert artifact.summary.unsupported_count == 1


def test_method_shorthand_transition(contract_flow):
    graph = contract_flow(
        """
        define('cart.clear', {
          pre: [],
          transition(s) {
            return { ...s, items: [] };
          },
        });
        """
    ).graph

    assert node_by_label(graph, "return { ...s, items: [] }").kind == NodeKind.ACTION
    assert graph.nodes_of_kind(NodeKind.UNSUPPORTED) == []


def test_empty_block_falls_through_to_end(contract_flow):
    graph = contract_flow(
        """
        define('cart.touch', {
          pre: [],
          transition: (s) => {},
        });
        """
    ).graph

    transition = node_by_label(graph, "transition")
    ok = node_by_label(graph, "ok")
    assert [(e.to_id, e.label) for e in graph.edges_from(transition.id)] == [(ok.id, None)]


def test_body_without_exits_uses_success_edge(contract_flow):
    graph = contract_flow(
        """
        define('cart.fail', {
          pre: [],
          transition: (s) => {
            throw new Error('unreachable');
          },
        });
        """
    ).graph

    transition = node_by_label(graph, "transition")
    ok = node_by_label(graph, "ok")
    thrown = node_by_label(graph, "throw new Error('unreachable')")
    assert {(e.to_id, e.label) for e in graph.edges_from(transition.id)} == {(thrown.id, None), (ok.id, "success")}


def test_post_and_invariant_chain(contract_flow):
    artifact = contract_flow(
        """
        define('cart.add', {
          pre: [],
          transition: (s, i) => ({ ...s, items: [...s.items, i] }),
          post: [(b, a) => a.items.length > b.items.length, (b, a) => true],
          invariant: [(s) => s.total >= 0],
        });
        """
    )
    graph = artifact.graph

    chain = [(n.label, n.kind) for n in graph.nodes if n.label.startswith(("post.", "invariant."))]
    assert chain == [
        ("post.1", NodeKind.POSTCONDITION),
        ("post.2", NodeKind.POSTCONDITION),
        ("invariant.1", NodeKind.INVARIANT),
    ]

    post1 = node_by_label(graph, "post.1")
    invariant = node_by_label(graph, "invariant.1")
    ok = node_by_label(graph, "ok")
    transition = node_by_label(graph, "transition")
    assert [e.from_id for e in graph.edges_to(post1.id)] == [transition.id]
    assert [e.to_id for e in graph.edges_from(invariant.id)] == [ok.id]
    assert artifact.summary.step_count == 4


def test_multiple_exits_converge_on_first_postcondition(contract_flow):
    graph = contract_flow(
        """
        define('cart.flip', {
          pre: [],
          transition: (s) => {
            if (s.on) {
              return { on: false };
            }
            return { on: true };
          },
          post: [(b, a) => a.on !== b.on],
        });
        """
    ).graph

    post = node_by_label(graph, "post.1")
    assert len(graph.edges_to(post.id)) == 2


LONG_CALL = "recalculateEverythingAboutTheCart(s, { includeShipping: true, includeTaxes: true });"


def test_long_labels_are_truncated(contract_flow):
    graph = contract_flow(
        f"""
        define('cart.long', {{
          pre: [],
          transition: (s) => {{
            {LONG_CALL}
            return s;
          }},
        }});
        """
    ).graph

    (label,) = [n.label for n in graph.nodes if n.label.startswith("recalc")]
    assert label == LONG_CALL[:61] + "..."
    assert len(label) == LABEL_MAX_CHARS == 64


def test_label_width_ignores_environment(contract_flow, monkeypatch):
    source = f"""
        define('cart.long', {{
          pre: [],
          transition: (s) => {{
            {LONG_CALL}
          }},
        }});
        """
    baseline = contract_flow(source).hash

    monkeypatch.setenv("FLOWDOC_LABEL_MAX_CHARS", "20")
    assert contract_flow(source).hash == baseline


def test_same_source_gives_same_hash(contract_flow):
    source = """
        define('cart.add', {
          pre: [(s) => s ? pass : err({ tag: 'Missing' })],
          transition: (s, i) => {
            if (i.qty > 0) {
              return { ...s, qty: i.qty };
            }
            return s;
          },
        });
        """

    assert contract_flow(source).hash == contract_flow(source).hash


def test_whitespace_only_changes_keep_the_hash(contract_flow):
    a = contract_flow(
        """
        define('cart.add', {
          pre: [],
          transition: (s) => { if (s.a && s.b) { return s; } return null; },
        });
        """
    )
    b = contract_flow(
        """
        define('cart.add', {
          pre: [],
          transition: (s) => {
            if (s.a   &&   s.b) {
              return   s;
            }
            return null;
          },
        });
        """
    )

    assert a.hash == b.hash


def test_semantic_changes_change_the_hash(contract_flow):
    template = """
        define('cart.add', {{
          pre: [(s) => s ? pass : err({{ tag: '{tag}' }})],
          transition: (s) => {{
            if ({cond}) {{
              return s;
            }}
            return null;
          }},
        }});
        """
    base = contract_flow(template.format(tag="Missing", cond="s.ok")).hash

    assert contract_flow(template.format(tag="Gone", cond="s.ok")).hash != base
    assert contract_flow(template.format(tag="Missing", cond="s.ready")).hash != base


def test_artifact_to_dict_shape(contract_flow):
    data = contract_flow(
        """
        define('cart.add', {
          pre: [],
          transition: (s) => s,
        });
        """
    ).to_dict()

    assert data["ownerKind"] == "contract"
    assert data["ownerId"] == "cart.add"
    assert set(data["graph"]) == {"nodes", "edges"}
    assert data["diagram"].startswith("```mermaid")
    assert len(data["hash"]) == 64
    assert data["summary"] == {"stepCount": 1, "branchCount": 0, "errorPathCount": 0, "unsupportedCount": 0}
