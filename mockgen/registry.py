from mockgen.cir.model import MockKind
from mockgen.generators.base import MockStrategy
from mockgen.generators.dummy import DummyStrategy
from mockgen.generators.spy import SpyStrategy
from mockgen.generators.stub import StubStrategy


def strategy_for(kind: MockKind, use_result: bool = False) -> MockStrategy:
    if kind is MockKind.STUB:
        return StubStrategy(use_result=use_result)
    if kind is MockKind.SPY:
        return SpyStrategy(use_result=use_result)
    if kind is MockKind.DUMMY:
        return DummyStrategy(use_result=use_result)
    raise ValueError(f"Unknown mock kind: {kind!r}")


def generate_mock_source(element, kind: MockKind, use_result: bool = False) -> str:
    return strategy_for(kind, use_result).generate(element)
