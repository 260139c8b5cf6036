"""Best-effort discovery of VNC servers on the USB link."""
from __future__ import annotations

import ipaddress
import logging
import re
import shutil
import subprocess
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from constants import COLLABORATORS, SCAN
from models import Endpoint

logger = logging.getLogger(__name__)

HOST_RE = re.compile(r"Host:\s+(\S+)")
OPEN_PORT_RE = re.compile(r"\b([0-9]+)/open/tcp\b")
IP_ADDR_CMD = ("ip", "-o", "-f", "inet", "addr", "show")


def parse_scan_output(output: str) -> Iterator[Endpoint]:
    """Yield one Endpoint per open port from grepable nmap output."""
    for line in output.splitlines():
        host = HOST_RE.search(line)
        if not host:
            continue
        for port in OPEN_PORT_RE.findall(line):
            yield Endpoint(host.group(1), int(port))


class DiscoveryAdapter:
    def __init__(
        self,
        scanner_cmd: Sequence[str] = (COLLABORATORS.SCANNER,),
        *,
        interface: str = SCAN.INTERFACE,
        timeout: float = SCAN.TIMEOUT,
    ) -> None:
        self.scanner_cmd = list(scanner_cmd)
        self.interface = interface
        self.timeout = timeout

    @property
    def scanner_available(self) -> bool:
        return shutil.which(self.scanner_cmd[0]) is not None

    def local_subnet(self) -> Tuple[Optional[ipaddress.IPv4Network], List[str]]:
        try:
            output = subprocess.check_output(
                list(IP_ADDR_CMD) + [self.interface],
                text=True,
                errors="replace",
                stderr=subprocess.DEVNULL,
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug("Could not read address of %s: %s", self.interface, exc)
            return None, []
        for line in output.splitlines():
            parts = line.split()
            if len(parts) < 4:
                continue
            try:
                iface = ipaddress.ip_interface(parts[3])
            except ValueError:
                continue
            network = iface.network
            if network.num_addresses > 256:
                network = ipaddress.ip_network(f"{iface.ip}/24", strict=False)
            return network, [str(iface.ip)]
        return None, []

    def run_scanner(self, network: ipaddress.IPv4Network) -> str:
        cmd = self.scanner_cmd + ["-p", SCAN.port_range, "--open", "-oG", "-", str(network)]
        logger.info("Running: %s", " ".join(cmd))
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=self.timeout,
            check=True,
        )
        return result.stdout

    def scan_local_link(self) -> List[Endpoint]:
        if not self.scanner_available:
            logger.debug("Scanner %s not installed, skipping discovery", self.scanner_cmd[0])
            return []
        network, local_ips = self.local_subnet()
        if network is None:
            logger.info("No IPv4 address on %s, skipping discovery", self.interface)
            return []
        try:
            output = self.run_scanner(network)
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("Discovery on %s failed: %s", network, exc)
            return []
        found = _without_hosts(parse_scan_output(output), local_ips)
        logger.info("Discovered %d server(s) on %s", len(found), network)
        return found


def _without_hosts(endpoints: Iterable[Endpoint], hosts: Iterable[str]) -> List[Endpoint]:
    skip = set(hosts)
    return [ep for ep in endpoints if ep.host not in skip]
