"""Main CLI entry point for pulse."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from pulse.exceptions import PulseError, ReconciliationError
from pulse.logging_config import get_logger, setup_logging
from pulse.models.nodes import ClusterHealth, ClusterNodeSet

app = typer.Typer(
    name="pulse",
    help="Health checks for etcd-backed Kubernetes control planes",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

HEALTH_STYLES = {
    ClusterHealth.HEALTHY: "green",
    ClusterHealth.DEGRADED: "yellow",
    ClusterHealth.UNAVAILABLE: "red",
}


# Global callback to set up logging
@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only log warnings and errors (hides per-member progress)"
    ),
    log_file: str | None = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Global options for all commands."""
    log_path = Path(log_file) if log_file else None
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_path)
    logger.debug("Logging initialized")


@app.command()
def version() -> None:
    """Show version information."""
    from pulse import __version__

    typer.echo(f"pulse version {__version__}")


def render_node_set(node_set: ClusterNodeSet) -> Table:
    """Build a table showing the etcd and Kubernetes view of every node."""
    table = Table(title="Control Plane Nodes")
    table.add_column("Name", style="cyan")
    table.add_column("Etcd IP", style="magenta")
    table.add_column("Etcd Health")
    table.add_column("Kube IP", style="yellow")
    table.add_column("Kube Status")

    for name in node_set.names():
        etcd_node = node_set.etcd_nodes.get(name)
        kube_node = node_set.kube_nodes.get(name)

        if etcd_node is None:
            etcd_ip, etcd_health = "-", "[red]missing[/red]"
        else:
            etcd_ip = etcd_node.ip or "N/A"
            etcd_health = "[green]✓ Healthy[/green]" if etcd_node.healthy else "[red]✗ Unhealthy[/red]"

        if kube_node is None:
            kube_ip, kube_status = "-", "[red]missing[/red]"
        else:
            kube_ip = kube_node.ip
            kube_status = "[green]✓ Ready[/green]" if kube_node.ready else "[red]✗ NotReady[/red]"

        table.add_row(name, etcd_ip, etcd_health, kube_ip, kube_status)

    return table


@app.command()
def check_etcd(
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="YAML file with health check settings"
    ),
    ca_cert: str | None = typer.Option(None, "--ca-cert", help="etcd CA certificate path"),
    cert: str | None = typer.Option(None, "--cert", help="etcd client certificate path"),
    key: str | None = typer.Option(None, "--key", help="etcd client key path"),
    kubeconfig: str | None = typer.Option(
        None, "--kubeconfig", help="Kubeconfig path (default: KUBECONFIG, ~/.kube/config, in-cluster)"
    ),
    endpoint: str | None = typer.Option(
        None, "--endpoint", "-e", help="etcd client endpoint (default: https://127.0.0.1:2379)"
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Per-member health probe timeout in seconds (default: 30)"
    ),
    strict: bool | None = typer.Option(
        None,
        "--strict/--no-strict",
        help="Require healthy etcd members and Ready nodes, not only matching IPs",
    ),
    control_plane_pattern: str | None = typer.Option(
        None,
        "--control-plane-pattern",
        help="Node name fragment marking control-plane nodes (default: master)",
    ),
) -> None:
    """
    Check etcd cluster health against the Kubernetes control plane.

    Probes every etcd member over its client URLs, lists the control-plane
    nodes from the Kubernetes API and verifies that both agree on node names
    and IP addresses.

    Examples:
        # Run on a kubeadm control-plane node
        pulse check-etcd

        # Only compare membership, ignore health and readiness
        pulse check-etcd --no-strict
    """
    from pulse.clients import create_core_v1_api, create_etcd_client, prober_factory
    from pulse.config import HealthCheckConfig
    from pulse.etcd.inspector import EtcdClusterInspector
    from pulse.kube import KubeNodeInspector, any_of, has_control_plane_label, name_contains
    from pulse.reconcile import run_health_check

    etcd_client = None
    try:
        settings = HealthCheckConfig.load(config_file) if config_file else HealthCheckConfig()
        settings = settings.merged(
            ca_cert_path=ca_cert,
            cert_path=cert,
            key_path=key,
            kubeconfig=kubeconfig,
            etcd_endpoint=endpoint,
            probe_timeout=timeout,
            require_health=strict,
            control_plane_pattern=control_plane_pattern,
        )
        settings.validate_tls_files()

        etcd_client = create_etcd_client(settings)
        etcd_inspector = EtcdClusterInspector(etcd_client, prober_factory(settings))
        kube_inspector = KubeNodeInspector(
            create_core_v1_api(settings),
            any_of(has_control_plane_label, name_contains(settings.control_plane_pattern)),
        )

        with console.status("Checking etcd and Kubernetes control plane..."):
            report = run_health_check(
                etcd_inspector, kube_inspector, require_health=settings.require_health
            )

        console.print(render_node_set(report.node_set))
        style = HEALTH_STYLES[report.etcd_health]
        console.print(f"\n[bold]Etcd cluster:[/bold] [{style}]{report.etcd_health.value}[/{style}]")
        console.print("[green]✓[/green] Etcd and Kubernetes control-plane nodes match")

    except ReconciliationError as e:
        logger.error(f"Reconciliation failed: {e.message}")
        console.print(f"[red]Mismatch:[/red] {e.message}")
        if e.details:
            console.print(f"\n{e.details}")
        raise typer.Exit(code=1)
    except PulseError as e:
        logger.error(f"Health check failed: {e.message}")
        console.print(f"[red]Error:[/red] {e.message}")
        if e.details:
            console.print(f"\n{e.details}")
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Health check interrupted by user[/yellow]")
        raise typer.Exit(code=130)
    except Exception as e:
        logger.error(f"Unexpected error during health check: {e}", exc_info=True)
        console.print(f"[red]Unexpected error:[/red] {e}")
        console.print("\nRun with --verbose --log-file debug.log for more details")
        raise typer.Exit(code=1)
    finally:
        if etcd_client is not None:
            etcd_client.close()


if __name__ == "__main__":
    app()
