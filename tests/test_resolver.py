"""Tests for the reference resolution pass."""

from dataclasses import asdict

from lbconv.engine.resolver import ReferenceResolver, build_index, resolve_references
from lbconv.model.config import (
    Configuration,
    HealthMonitor,
    Pool,
    PoolMember,
    RealServer,
    VirtualServer,
)
from lbconv.pipeline import parse_config


def _graph() -> Configuration:
    return Configuration(
        virtual_servers=[
            VirtualServer(name="vs1", pool_name="p1"),
            VirtualServer(name="vs2", pool_name="nope"),
            VirtualServer(name="vs3"),
        ],
        pools=[
            Pool(
                name="p1",
                health_check_names=["HC_HTTP", "HC_MISSING", "HC_TCP"],
                members=[
                    PoolMember(id=1, real_server_name="rs1"),
                    PoolMember(id=2, real_server_name="rs_missing"),
                    PoolMember(id=3),
                ],
            ),
        ],
        real_servers=[RealServer(name="rs1", address="10.0.0.1")],
        health_monitors=[HealthMonitor(name="HC_TCP", type="tcp"), HealthMonitor(name="HC_HTTP", type="http")],
    )


class TestReferenceResolver:

    def test_virtual_server_pool(self):
        config = resolve_references(_graph())
        assert config.virtual_servers[0].pool is config.pools[0]

    def test_dangling_pool_is_none_not_error(self):
        config = resolve_references(_graph())
        assert config.virtual_servers[1].pool is None
        assert config.virtual_servers[2].pool is None

    def test_monitors_keep_list_order_and_drop_unknown(self):
        config = resolve_references(_graph())
        assert [m.name for m in config.pools[0].health_monitors] == ["HC_HTTP", "HC_TCP"]
        # The name list itself is untouched
        assert config.pools[0].health_check_names == ["HC_HTTP", "HC_MISSING", "HC_TCP"]

    def test_member_real_servers(self):
        config = resolve_references(_graph())
        members = config.pools[0].members
        assert members[0].real_server is config.real_servers[0]
        assert members[1].real_server is None
        assert members[2].real_server is None

    def test_collections_not_mutated(self):
        config = _graph()
        before = [m.name for m in config.health_monitors], [r.name for r in config.real_servers]
        resolve_references(config)
        after = [m.name for m in config.health_monitors], [r.name for r in config.real_servers]
        assert before == after

    def test_idempotent(self):
        config = resolve_references(_graph())
        first = asdict(config)
        resolve_references(config)
        assert asdict(config) == first

    def test_dangling_references_become_diagnostics(self):
        config = resolve_references(_graph())
        assert len(config.diagnostics) == 3
        assert config.unresolved_references() == [
            "virtual-server 'vs2' -> pool 'nope'",
            "pool 'p1' -> health-monitor 'HC_MISSING'",
            "pool 'p1' member 2 -> real-server 'rs_missing'",
        ]

    def test_first_definition_wins(self):
        first, second = Pool(name="dup"), Pool(name="dup", type="ipv6")
        config = Configuration(virtual_servers=[VirtualServer(name="vs", pool_name="dup")], pools=[first, second])
        ReferenceResolver(config).resolve()
        assert config.virtual_servers[0].pool is first

    def test_lookup_is_case_sensitive(self):
        config = Configuration(
            virtual_servers=[VirtualServer(name="vs", pool_name="WEB")], pools=[Pool(name="web")]
        )
        resolve_references(config)
        assert config.virtual_servers[0].pool is None

    def test_build_index(self):
        a, b = RealServer(name="a"), RealServer(name="b")
        assert build_index([a, b]) == {"a": a, "b": b}


class TestResolutionOnParsedInput:

    def test_health_check_list_resolves_in_order(self, config_edit_dump):
        config = parse_config(config_edit_dump)
        pool = config.pools[0]
        assert pool.health_check_names == ["HC_HTTP", "HC_TCP"]
        assert [m.name for m in pool.health_monitors] == ["HC_HTTP", "HC_TCP"]

    def test_forward_reference(self, config_edit_dump):
        config = parse_config(config_edit_dump)
        vs_forward = config.virtual_servers[2]
        assert vs_forward.pool is not None
        assert vs_forward.pool.name == "late_pool"

    def test_brace_member_resolves_node(self, brace_dump):
        config = parse_config(brace_dump)
        web1, second = config.pools[0].members
        assert web1.real_server.address == "10.0.0.11"
        assert second.real_server.name == "10.0.0.12"
        assert [m.name for m in config.pools[1].health_monitors] == ["hc_tcp"]

    def test_idempotent_on_parsed_graph(self, brace_dump):
        config = parse_config(brace_dump)
        first = asdict(config)
        resolve_references(config)
        assert asdict(config) == first


class TestVdomResolution:

    def test_reference_resolves_inside_own_vdom(self):
        config = Configuration(
            virtual_servers=[VirtualServer(name="vs_b", pool_name="web", vdom="b")],
            pools=[
                Pool(name="web", load_balance_method="A", vdom="a"),
                Pool(name="web", load_balance_method="B", vdom="b"),
            ],
        )
        resolve_references(config)
        assert config.virtual_servers[0].pool.load_balance_method == "B"

    def test_falls_back_to_root_scope(self):
        shared = HealthMonitor(name="HC_TCP", type="tcp")
        config = Configuration(
            pools=[Pool(name="web", vdom="b", health_check_names=["HC_TCP"])],
            health_monitors=[shared],
        )
        resolve_references(config)
        assert config.pools[0].health_monitors == [shared]

    def test_other_vdom_is_not_visible(self):
        config = Configuration(
            virtual_servers=[VirtualServer(name="vs_b", pool_name="web", vdom="b")],
            pools=[Pool(name="web", vdom="a")],
        )
        resolve_references(config)
        assert config.virtual_servers[0].pool is None
        assert "VDOM 'b'" in config.diagnostics[0].message

    def test_parsed_vdoms(self):
        config = parse_config(
            "config vdom\n"
            "  edit a\n"
            "    config load-balance pool\n"
            '      edit "web"\n'
            "        set load-balance-method A\n"
            "      next\n"
            "    end\n"
            "  next\n"
            "  edit b\n"
            "    config load-balance pool\n"
            '      edit "web"\n'
            "        set load-balance-method B\n"
            "      next\n"
            "    end\n"
            "    config load-balance virtual-server\n"
            '      edit "vs_b"\n'
            "        set load-balance-pool web\n"
            "      next\n"
            "    end\n"
            "  next\n"
            "end\n"
        )
        assert config.virtual_servers[0].pool.load_balance_method == "B"


class TestDiagnosticDedup:

    def test_repeated_diagnostic_recorded_once(self):
        config = Configuration()
        for _ in range(3):
            config.add_diagnostic("Pool 'p' references unknown health monitor 'X'")
        assert len(config.diagnostics) == 1

    def test_initial_diagnostics_seed_the_dedup(self):
        config = Configuration()
        config.add_diagnostic("once", line_number=4)
        copy = Configuration(diagnostics=list(config.diagnostics))
        copy.add_diagnostic("once", line_number=4)
        assert len(copy.diagnostics) == 1
