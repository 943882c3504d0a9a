"""
Deployment Module Descriptors
=============================

A deployment module is a named, immutable description of which contracts to
deploy, with which constructor arguments, and which of the resulting
contracts are exposed as outputs. Modules are declared by a callback that
receives a ModuleBuilder:

    def define(m):
        switch_assets = m.contract("SwitchAssets")
        return {"switchAssets": switch_assets}

    module = build_module("SwitchAssetsModule", define, registry)

Building never touches the network or the artifacts directory; see
deployment.executor for running a module.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import (
    DuplicateFutureId,
    DuplicateModuleName,
    InvalidConstructorArgument,
    InvalidModuleName,
    ModuleBuilderClosed,
    UndeclaredOutputReference,
    UnknownFutureReference,
)

MODULE_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
FUTURE_ID_PATTERN = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


@dataclass(frozen=True)
class ContractFuture:
    """Reference to the contract a deployment step will produce"""
    id: str
    module_name: str
    artifact_name: str

    def __repr__(self) -> str:
        return f"ContractFuture({self.id!r})"


@dataclass(frozen=True)
class DeploymentStep:
    """Deploy one artifact with the given constructor arguments"""
    future: ContractFuture
    args: Tuple[Any, ...] = ()
    value: int = 0
    after: Tuple[ContractFuture, ...] = ()

    @property
    def artifact_name(self) -> str:
        return self.future.artifact_name

    def dependencies(self) -> List[ContractFuture]:
        """Futures that must be deployed before this step, in declaration order"""
        deps = list(_iter_futures(self.args))
        for future in self.after:
            if future not in deps:
                deps.append(future)
        return deps


@dataclass(frozen=True)
class DeploymentModule:
    name: str
    steps: Tuple[DeploymentStep, ...]
    outputs: Mapping[str, ContractFuture]
    submodules: Tuple["DeploymentModule", ...] = field(default=())

    def all_steps(self) -> List[DeploymentStep]:
        """Steps of this module and its submodules in execution order.

        Submodules come first (depth-first, each module once), followed by
        this module's own steps in declaration order.
        """
        ordered: List[DeploymentStep] = []
        seen_modules = set()

        def visit(module: "DeploymentModule") -> None:
            if id(module) in seen_modules:
                return
            seen_modules.add(id(module))
            for sub in module.submodules:
                visit(sub)
            ordered.extend(module.steps)

        visit(self)
        return ordered

    def future_ids(self) -> List[str]:
        return [step.future.id for step in self.all_steps()]

    def step_for(self, future: ContractFuture) -> DeploymentStep:
        for step in self.all_steps():
            if step.future == future:
                return step
        raise KeyError(f"{future.id} is not part of module {self.name}")


class ModuleBuilder:
    """Accumulates deployment steps while a module callback runs"""

    def __init__(self, module_name: str):
        self.module_name = module_name
        self._steps: List[DeploymentStep] = []
        self._submodules: List[DeploymentModule] = []
        self._used: Dict[str, DeploymentModule] = {}
        self._known: Dict[str, ContractFuture] = {}
        self._closed = False

    def contract(self, artifact_name: str, args: Optional[Iterable[Any]] = None, *,
                 id: Optional[str] = None, value: int = 0,
                 after: Iterable[ContractFuture] = ()) -> ContractFuture:
        """
        Declare the deployment of a compiled contract artifact.

        Args:
            artifact_name: Contract name (``SwitchAssets``) or fully qualified
                name (``contracts/SwitchAssets.sol:SwitchAssets``)
            args: Constructor arguments; futures are replaced by the
                address of the referenced deployment at execution time
            id: Local step id, defaults to the contract name
            value: Wei sent with the constructor call
            after: Futures that must be deployed before this one

        Returns:
            A future usable as an output or as an argument of a later step
        """
        self._ensure_open()
        if not artifact_name or not isinstance(artifact_name, str):
            raise InvalidConstructorArgument("artifact name must be a non-empty string", self.module_name)

        local_id = id if id is not None else artifact_name.rsplit(":", 1)[-1]
        if not FUTURE_ID_PATTERN.match(local_id):
            raise InvalidConstructorArgument(f"invalid step id '{local_id}'", self.module_name)

        future = ContractFuture(
            id=f"{self.module_name}#{local_id}",
            module_name=self.module_name,
            artifact_name=artifact_name,
        )
        if future.id in self._known:
            raise DuplicateFutureId(
                f"step id '{local_id}' is declared twice; pass id= to deploy "
                f"'{artifact_name}' more than once",
                self.module_name,
            )

        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidConstructorArgument(f"value for '{local_id}' must be a non-negative int", self.module_name)

        frozen_args = self._freeze(list(args) if args is not None else [], local_id)
        after = tuple(after)
        for dep in after:
            self._check_known(dep, f"'after' of '{local_id}'")

        self._steps.append(DeploymentStep(future=future, args=frozen_args, value=value, after=after))
        self._known[future.id] = future
        return future

    def use_module(self, module: DeploymentModule) -> Mapping[str, ContractFuture]:
        """Include another module; returns its outputs for use in this one"""
        self._ensure_open()
        if any(used is module for used in self._submodules):
            return module.outputs

        tree = _module_tree(module)
        for sub in tree:
            if sub.name == self.module_name:
                raise DuplicateModuleName(sub.name)
            seen = self._used.get(sub.name)
            if seen is not None and seen is not sub:
                raise DuplicateModuleName(sub.name)

        self._submodules.append(module)
        for sub in tree:
            self._used[sub.name] = sub
        for step in module.all_steps():
            self._known[step.future.id] = step.future
        return module.outputs

    def _freeze(self, value: Any, local_id: str) -> Any:
        if isinstance(value, (list, tuple)):
            return tuple(self._freeze(item, local_id) for item in value)
        if isinstance(value, ContractFuture):
            self._check_known(value, f"constructor arguments of '{local_id}'")
            return value
        if isinstance(value, (str, int, bool, bytes)):
            return value
        raise InvalidConstructorArgument(
            f"unsupported constructor argument {value!r} ({type(value).__name__}) for '{local_id}'",
            self.module_name,
        )

    def _check_known(self, future: Any, where: str) -> None:
        if not isinstance(future, ContractFuture) or self._known.get(future.id) != future:
            raise UnknownFutureReference(
                f"{where} references {future!r}, which is not declared in this module",
                self.module_name,
            )

    def _ensure_open(self) -> None:
        if self._closed:
            raise ModuleBuilderClosed(
                "steps can only be declared while the module callback runs",
                self.module_name,
            )

    def _finish(self, outputs: Any) -> DeploymentModule:
        self._closed = True
        if outputs is None:
            outputs = {}
        if not isinstance(outputs, Mapping):
            raise UndeclaredOutputReference(
                f"module callback must return a mapping of outputs, got {type(outputs).__name__}",
                self.module_name,
            )

        checked: Dict[str, ContractFuture] = {}
        for key, future in outputs.items():
            if not isinstance(key, str) or not key:
                raise UndeclaredOutputReference(f"output name {key!r} must be a non-empty string", self.module_name)
            if not isinstance(future, ContractFuture) or self._known.get(future.id) != future:
                raise UndeclaredOutputReference(
                    f"output '{key}' references {future!r}, which no step of this module produces",
                    self.module_name,
                )
            checked[key] = future

        return DeploymentModule(
            name=self.module_name,
            steps=tuple(self._steps),
            outputs=MappingProxyType(checked),
            submodules=tuple(self._submodules),
        )


def build_module(name: str,
                 define: Callable[[ModuleBuilder], Optional[Mapping[str, ContractFuture]]],
                 registry: Any = None) -> DeploymentModule:
    """
    Build a deployment module and optionally register it.

    Args:
        name: Module name, unique within the registry
        define: Callback declaring steps on the builder and returning outputs
        registry: ModuleRegistry to register the module with

    Returns:
        The immutable module descriptor
    """
    if not isinstance(name, str) or not MODULE_NAME_PATTERN.match(name):
        raise InvalidModuleName(f"invalid module name {name!r}")
    if registry is not None and name in registry:
        raise DuplicateModuleName(name)

    builder = ModuleBuilder(name)
    module = builder._finish(define(builder))

    if registry is not None:
        registry.register(module)
    return module


def _iter_futures(value: Any) -> Iterable[ContractFuture]:
    if isinstance(value, ContractFuture):
        yield value
    elif isinstance(value, tuple):
        for item in value:
            yield from _iter_futures(item)


def _module_tree(module: DeploymentModule) -> List[DeploymentModule]:
    """The module and every module it uses, each object once"""
    found: List[DeploymentModule] = []

    def visit(current: DeploymentModule) -> None:
        if any(m is current for m in found):
            return
        found.append(current)
        for sub in current.submodules:
            visit(sub)

    visit(module)
    return found
