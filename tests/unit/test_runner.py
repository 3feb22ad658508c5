"""End-to-end workflow tests against the fake Orka API."""

from orkabuild.contracts import RunState, StepAction
from orkabuild.runner import StepRunner, build_workflow
from orkabuild.steps import BuildStep


def test_scenario_a_reaches_provisioning_with_ssh_coordinates(
    make_config, client, reporter, store, fake_orka
):
    seen = []
    runner = build_workflow(
        make_config(),
        client,
        reporter,
        store=store,
        provisioner=lambda host, port: seen.append((host, port)),
    )

    state = runner.run()

    assert not state.failed
    assert seen == [("10.0.0.5", 2222)]
    assert (state.vm_id, state.ssh_host, state.ssh_port) == ("vm-1", "10.0.0.5", 2222)
    assert [r.step_name for r in state.steps] == [
        "authenticate",
        "create_vm",
        "provision",
        "create_image",
    ]
    assert all(r.status == "completed" for r in state.steps)


def test_scenario_b_copy_failure_deletes_image_and_never_purges(
    make_config, client, reporter, store, fake_orka
):
    fake_orka.respond("POST", "/resources/image/copy", 500)
    runner = build_workflow(make_config(image_precopy=True), client, reporter, store=store)

    state = runner.run()

    assert state.failed and state.precopy_failed
    assert fake_orka.paths() == [
        "/token",
        "/resources/image/copy",
        "/resources/image/delete",
    ]
    assert fake_orka.count("/resources/vm/purge") == 0
    assert [r.step_name for r in state.steps] == ["authenticate", "create_vm"]
    assert state.steps[-1].status == "failed"


def test_scenario_c_success_purges_exactly_once(
    make_config, client, reporter, store, fake_orka
):
    runner = build_workflow(make_config(), client, reporter, store=store)

    state = runner.run()

    assert not state.failed
    assert fake_orka.paths() == [
        "/token",
        "/resources/vm/create",
        "/resources/vm/deploy",
        "/resources/image/save",
        "/resources/vm/purge",
    ]
    assert fake_orka.call("/resources/vm/purge")["json"] == {"name": "builder-1"}
    assert fake_orka.count("/resources/image/delete") == 0
    assert state.steps[2].status == "skipped"


def test_precopy_success_commits_and_keeps_image(make_config, client, reporter, fake_orka):
    runner = build_workflow(make_config(image_precopy=True), client, reporter)

    state = runner.run()

    assert not state.failed
    assert "/resources/image/commit" in fake_orka.paths()
    assert "/resources/image/save" not in fake_orka.paths()
    assert fake_orka.count("/resources/vm/purge") == 1
    assert fake_orka.count("/resources/image/delete") == 0


def test_login_failure_stops_everything(make_config, client, reporter, fake_orka):
    fake_orka.respond("POST", "/token", 500)
    runner = build_workflow(make_config(image_precopy=True), client, reporter)

    state = runner.run()

    assert state.failed
    assert fake_orka.paths() == ["/token"]


def test_no_delete_vm_leaves_everything_in_place(make_config, client, reporter, fake_orka):
    runner = build_workflow(make_config(no_delete_vm=True), client, reporter)

    runner.run()

    assert fake_orka.count("/resources/vm/purge") == 0
    assert fake_orka.count("/resources/image/delete") == 0


def test_provisioning_failure_purges_deployed_vm(make_config, client, reporter, fake_orka):
    runner = build_workflow(
        make_config(), client, reporter, provisioner=lambda host, port: False
    )

    state = runner.run()

    assert state.failed
    assert "/resources/image/save" not in fake_orka.paths()
    assert fake_orka.paths()[-1] == "/resources/vm/purge"


class _Recorder(BuildStep):
    def __init__(self, name, log, action=StepAction.CONTINUE, explode=False):
        self.name = name
        self.log = log
        self.action = action
        self.explode = explode

    def run(self, state):
        self.log.append(f"run:{self.name}")
        if self.explode:
            raise RuntimeError("kaboom")
        return self.action

    def cleanup(self, state):
        self.log.append(f"cleanup:{self.name}")
        if self.explode:
            raise RuntimeError("cleanup kaboom")


def test_runner_cleans_up_started_steps_in_reverse(reporter):
    log = []
    steps = [
        _Recorder("one", log),
        _Recorder("two", log, action=StepAction.HALT),
        _Recorder("three", log),
    ]

    state = StepRunner(steps, reporter).run()

    assert state.failed
    assert log == ["run:one", "run:two", "cleanup:two", "cleanup:one"]


def test_runner_treats_exceptions_as_halt(reporter):
    log = []
    steps = [_Recorder("one", log), _Recorder("two", log, explode=True), _Recorder("three", log)]

    state = StepRunner(steps, reporter).run()

    assert state.failed
    assert state.error == "kaboom"
    assert log == ["run:one", "run:two", "cleanup:two", "cleanup:one"]
    assert any("cleanup kaboom" in e for e in reporter.errors)


def test_runner_cancel_stops_before_next_step(reporter):
    log = []
    runner = None

    class Canceller(_Recorder):
        def run(self, state):
            runner.cancel()
            return super().run(state)

    runner = StepRunner([Canceller("one", log), _Recorder("two", log)], reporter)
    state = runner.run(RunState())

    assert state.cancelled and not state.failed
    assert log == ["run:one", "cleanup:one"]


def test_empty_login_token_stops_before_deploy(make_config, client, reporter, fake_orka):
    fake_orka.respond("POST", "/token", 200, {})
    runner = build_workflow(make_config(), client, reporter)

    state = runner.run()

    assert state.failed
    assert state.vm_id == ""
    assert fake_orka.paths() == ["/token"]


def test_deploy_without_ip_never_reaches_provisioner(
    make_config, client, reporter, fake_orka
):
    fake_orka.respond("POST", "/resources/vm/deploy", 200, {"vmId": "vm-1", "sshPort": "22"})
    seen = []
    runner = build_workflow(
        make_config(), client, reporter, provisioner=lambda host, port: seen.append((host, port))
    )

    state = runner.run()

    assert state.failed
    assert seen == []
    assert fake_orka.paths()[-1] == "/resources/vm/purge"


def test_runner_can_run_again_after_cancel(reporter):
    log = []
    runner = None

    class CancelOnce(_Recorder):
        cancelled = False

        def run(self, state):
            if not self.cancelled:
                self.cancelled = True
                runner.cancel()
            return super().run(state)

    runner = StepRunner([CancelOnce("one", log), _Recorder("two", log)], reporter)
    assert runner.run().cancelled

    log.clear()
    state = runner.run()

    assert not state.cancelled
    assert log == ["run:one", "run:two", "cleanup:two", "cleanup:one"]
