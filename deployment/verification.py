"""Source-verification notes for deployed contracts.

These records are informational: they render the ``hardhat verify`` command
and block explorer link for a deployment, they do not contact any service.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from web3 import Web3


@dataclass(frozen=True)
class VerificationRecord:
    contract_name: str
    address: str
    network: str
    constructor_args: Tuple[Any, ...] = ()
    explorer_url: Optional[str] = None

    def __post_init__(self):
        if not Web3.is_address(self.address):
            raise ValueError(f"invalid contract address for {self.contract_name}: {self.address!r}")
        object.__setattr__(self, 'address', Web3.to_checksum_address(self.address))
        object.__setattr__(self, 'constructor_args', tuple(self.constructor_args))
        if self.explorer_url:
            object.__setattr__(self, 'explorer_url', self.explorer_url.rstrip('/'))

    @property
    def needs_args_file(self) -> bool:
        """Array arguments cannot be passed on the command line"""
        return any(isinstance(arg, (list, tuple)) for arg in self.constructor_args)

    def command(self, args_file: Optional[str] = None) -> str:
        """
        Render the ``npx hardhat verify`` command.

        Args:
            args_file: Path of a module written from constructor_args_module();
                required when any constructor argument is an array

        Raises:
            ValueError: array arguments and no args_file
        """
        parts = ["npx", "hardhat", "verify", "--network", self.network]
        if args_file:
            parts.extend(["--constructor-args", args_file, self.address])
        elif self.needs_args_file:
            raise ValueError(
                f"{self.contract_name} has array constructor arguments; "
                f"write constructor_args_module() to a file and pass it as args_file"
            )
        else:
            parts.append(self.address)
            parts.extend(_format_arg(arg) for arg in self.constructor_args)
        return " ".join(parts)

    def constructor_args_module(self) -> str:
        """JavaScript module for ``hardhat verify --constructor-args``"""
        args = [_js_value(arg) for arg in self.constructor_args]
        return f"module.exports = {json.dumps(args, indent=2)};\n"

    def explorer_link(self) -> Optional[str]:
        if not self.explorer_url:
            return None
        return f"{self.explorer_url}/address/{self.address}#code"

    @classmethod
    def from_deployment(cls, handle: Any, network: str, constructor_args: Sequence[Any] = (),
                        explorer_url: Optional[str] = None) -> "VerificationRecord":
        """Build a record from a DeployedContract handle"""
        return cls(
            contract_name=handle.contract_name,
            address=handle.address,
            network=network,
            constructor_args=tuple(constructor_args),
            explorer_url=explorer_url,
        )


def _format_arg(arg: Any) -> str:
    if isinstance(arg, bool):
        return "true" if arg else "false"
    if isinstance(arg, bytes):
        return "0x" + arg.hex()
    if isinstance(arg, str) and (" " in arg or not arg):
        return f'"{arg}"'
    return str(arg)


def _js_value(arg: Any) -> Any:
    if isinstance(arg, (list, tuple)):
        return [_js_value(item) for item in arg]
    if isinstance(arg, bytes):
        return "0x" + arg.hex()
    # Numbers past 2**53 lose precision in JavaScript
    if isinstance(arg, int) and not isinstance(arg, bool) and abs(arg) > 2 ** 53 - 1:
        return str(arg)
    return arg
