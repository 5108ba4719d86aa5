from chainsaw_runner.runner import ExecutionUnit, expand_scenarios


class TestExpandScenarios:
    def test_no_scenarios(self, make_test):
        units = expand_scenarios("quick-start", 3, make_test("quick-start"))

        assert units == [ExecutionUnit(name="quick-start", test_id=3, scenario_id=0, bindings={})]

    def test_one_unit_per_scenario(self, make_test):
        test = make_test("multi", scenarios=[{"color": "red"}, {"color": "blue", "size": 2}])

        units = expand_scenarios("multi", 1, test)

        assert [u.scenario_id for u in units] == [1, 2]
        assert [u.name for u in units] == ["multi", "multi"]
        assert units[0].bindings == {"color": "red"}
        assert units[1].bindings == {"color": "blue", "size": 2}

    def test_empty_scenario_bindings(self, make_test):
        units = expand_scenarios("t", 1, make_test("t", scenarios=[{}]))

        assert len(units) == 1
        assert units[0].scenario_id == 1
        assert units[0].bindings == {}
