"""Unit tests for the Update and Harden modules."""
from hostcore.errors import CommandFailedError, ToolNotFoundError
from hostcore.modules.harden import HardenModule, match_packages
from hostcore.modules.update import UpdateModule
from hostcore.observer.events import Severity

from fakes import make_toolbox


class TestUpdateModule:
    def test_simulate_plans_without_probing(self, make_ctx, read_messages):
        tools, rec = make_toolbox()
        outcome = UpdateModule(make_ctx(simulate=True, update=True), tools).run(simulate=True)

        assert rec.calls == []
        simulated = read_messages(Severity.SIMULATED)
        assert simulated == [
            "Would upgrade all winget packages: winget upgrade --all",
            "Would upgrade all chocolatey packages: chocolatey upgrade --all",
            "Would trigger a Windows Update scan: UsoClient.exe StartScan",
        ]
        assert outcome.succeeded

    def test_all_providers_run(self, make_ctx):
        tools, rec = make_toolbox()
        outcome = UpdateModule(make_ctx(update=True), tools).run(simulate=False)

        assert rec.mutating() == ["update.invoke", "update.invoke", "update_scan.trigger"]
        assert outcome.succeeded

    def test_missing_provider_is_a_warning_and_others_run(self, make_ctx, read_messages):
        tools, rec = make_toolbox(updaters=(("winget", False), ("chocolatey", True)))
        outcome = UpdateModule(make_ctx(update=True), tools).run(simulate=False)

        assert "winget not found; skipping." in read_messages(Severity.WARNING)
        assert ("update.invoke", ("chocolatey",)) in rec.calls
        assert ("update.invoke", ("winget",)) not in rec.calls
        assert "update_scan.trigger" in rec.names()
        # Absent is expected, not a failure
        assert outcome.succeeded

    def test_failed_upgrade_still_triggers_scan(self, make_ctx, read_messages):
        tools, rec = make_toolbox()
        rec.failures["update.invoke"] = CommandFailedError(["winget", "upgrade"], 2316632065, "no network")

        outcome = UpdateModule(make_ctx(update=True), tools).run(simulate=False)

        assert "update_scan.trigger" in rec.names()
        assert outcome.succeeded is False
        assert len(read_messages(Severity.ERROR)) == 2

    def test_scan_trigger_missing_binary(self, make_ctx, read_messages):
        tools, rec = make_toolbox()
        rec.failures["update_scan.trigger"] = ToolNotFoundError("UsoClient.exe")

        outcome = UpdateModule(make_ctx(update=True), tools).run(simulate=False)

        assert outcome.succeeded is False
        assert any("UsoClient.exe" in e for e in read_messages(Severity.ERROR))


class TestHardenModule:
    INSTALLED = [
        "Microsoft.BingWeather_4.53.0_x64__8wekyb3d8bbwe",
        "Microsoft.ZuneMusic_11.2.0_x64__8wekyb3d8bbwe",
        "Microsoft.WindowsCalculator_11.2_x64__8wekyb3d8bbwe",
    ]

    def test_match_packages_is_case_insensitive_substring(self):
        assert match_packages(self.INSTALLED, "microsoft.bingweather") == [self.INSTALLED[0]]
        assert match_packages(self.INSTALLED, "Microsoft.People") == []

    def test_simulate_plans_three_passes(self, make_ctx, read_messages):
        tools, rec = make_toolbox(installed_apps=self.INSTALLED)
        HardenModule(make_ctx(simulate=True, harden=True), tools).run(simulate=True)

        assert rec.calls == []
        simulated = read_messages(Severity.SIMULATED)
        assert len(simulated) == 3
        assert "AllowTelemetry=1" in simulated[1]
        assert "reg add" in simulated[1]
        assert simulated[0].endswith("each with: Remove-AppxPackage <package>")
        assert "Microsoft.BingNews" in simulated[0]
        assert simulated[2].endswith("each with: Set-Service -Name <service> -StartupType Manual")
        assert "DiagTrack" in simulated[2]

    def test_apply_removes_only_listed_packages(self, make_ctx, targets):
        tools, rec = make_toolbox(installed_apps=self.INSTALLED, present_services=["DiagTrack", "Fax"])
        outcome = HardenModule(make_ctx(harden=True), tools).run(simulate=False)

        removed = [args[0] for name, args in rec.calls if name == "apps.remove"]
        assert removed == self.INSTALLED[:2]
        assert tools.config_values.values == {(targets.telemetry_key, "AllowTelemetry"): 1}
        demoted = [args[0] for name, args in rec.calls if name == "services.set_startup_manual"]
        assert demoted == ["DiagTrack", "Fax"]
        assert outcome.succeeded

    def test_absent_items_are_silent(self, make_ctx, read_messages):
        tools, rec = make_toolbox()
        outcome = HardenModule(make_ctx(harden=True), tools).run(simulate=False)

        assert "apps.remove" not in rec.names()
        assert "services.set_startup_manual" not in rec.names()
        assert read_messages(Severity.WARNING) == []
        assert read_messages(Severity.ERROR) == []
        assert outcome.succeeded

    def test_passes_are_independent(self, make_ctx, read_messages):
        tools, rec = make_toolbox(installed_apps=self.INSTALLED, present_services=["DiagTrack"])
        rec.failures["apps.installed"] = CommandFailedError(["powershell", "Get-AppxPackage"], 1, "denied")
        rec.failures["config.set_value"] = CommandFailedError(["reg", "add"], 1, "Access is denied.")

        outcome = HardenModule(make_ctx(harden=True), tools).run(simulate=False)

        assert ("services.set_startup_manual", ("DiagTrack",)) in rec.calls
        assert outcome.succeeded is False
        warnings = read_messages(Severity.WARNING)
        assert any("Could not list installed app packages" in w for w in warnings)
        assert any(w.startswith("telemetry level failed:") for w in warnings)
