"""Estado de seleção de um produto aberto na vitrine.

Um `SelectionState` por produto: guarda quais opções de cada grupo de
variação e quais adicionais o cliente marcou, aplica as regras de
cardinalidade e calcula o total. Nada aqui lança exceção para entrada do
cliente: recusas voltam como avisos (`SelectionLimitReached`,
`OptionUnavailable`) e o estado fica como estava.
"""
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Set, Union

from .menu.models import Extra, SelectedVariation, VariationGroup
from .pricing import line_total


@dataclass(frozen=True)
class SelectionLimitReached:
    group_id: str
    max_selections: int

    @property
    def message(self) -> str:
        return f"Escolha exatamente {self.max_selections} opções neste grupo."


@dataclass(frozen=True)
class OptionUnavailable:
    group_id: Optional[str]
    option_id: str

    @property
    def message(self) -> str:
        return "Opção indisponível."


Notice = Union[SelectionLimitReached, OptionUnavailable]


class SelectionState:
    def __init__(self, groups: Sequence[VariationGroup], extras: Sequence[Extra] = ()):
        self.groups: Dict[str, VariationGroup] = {g.id: g for g in groups}
        self._order: List[str] = [g.id for g in groups]
        self.extras: Dict[str, Extra] = {e.id: e for e in extras if e.is_available}
        self.selected: Dict[str, Set[str]] = {}
        self.selected_extra_ids: Set[str] = set()
        self.initialize()

    # ---------- mutações ----------

    def initialize(self) -> None:
        """Zera tudo; grupos de escolha única recebem a opção padrão disponível."""
        self.selected = {gid: set() for gid in self._order}
        self.selected_extra_ids = set()
        for gid in self._order:
            g = self.groups[gid]
            if g.allow_multiple:
                continue
            for o in g.available_options():
                if o.is_default:
                    self.selected[gid] = {o.id}
                    break
        self._check_invariants()

    def toggle_option(self, group_id: str, option_id: str) -> Optional[Notice]:
        g = self.groups.get(group_id)
        opt = g.option(option_id) if g else None
        if g is None or opt is None or not opt.is_available:
            return OptionUnavailable(group_id, option_id)

        current = self.selected[group_id]
        if not g.allow_multiple:
            # rádio: sempre substitui
            self.selected[group_id] = {option_id}
        elif option_id in current:
            current.discard(option_id)
        elif len(current) >= g.limit:
            return SelectionLimitReached(group_id, g.limit)
        else:
            current.add(option_id)
        self._check_invariants()
        return None

    def toggle_extra(self, extra_id: str) -> Optional[Notice]:
        if extra_id not in self.extras:
            return OptionUnavailable(None, extra_id)
        if extra_id in self.selected_extra_ids:
            self.selected_extra_ids.discard(extra_id)
        else:
            self.selected_extra_ids.add(extra_id)
        return None

    def replay(self, options: Dict[str, Sequence[str]], extra_ids: Sequence[str] = ()) -> List[Notice]:
        """Reaplica uma seleção vinda do cliente, toggle a toggle.

        Grupos citados em `options` recomeçam vazios; os demais mantêm o
        estado inicial (padrões).
        """
        notices: List[Notice] = []
        for gid, chosen in options.items():
            if gid not in self.groups:
                notices.append(OptionUnavailable(gid, ",".join(chosen)))
                continue
            self.selected[gid] = set()
            for oid in chosen:
                if oid in self.selected[gid]:
                    continue
                n = self.toggle_option(gid, oid)
                if n is not None:
                    notices.append(n)
        for eid in extra_ids:
            if eid in self.selected_extra_ids:
                continue
            n = self.toggle_extra(eid)
            if n is not None:
                notices.append(n)
        return notices

    def _check_invariants(self) -> None:
        # corta o que não cabe; só acontece se `selected` for alterado por fora
        fixed: Dict[str, Set[str]] = {}
        for gid in self._order:
            g = self.groups[gid]
            chosen = self.selected.get(gid, set())
            valid = [o.id for o in g.available_options() if o.id in chosen]
            fixed[gid] = set(valid[: g.limit])
        self.selected = fixed

    # ---------- leitura ----------

    def count(self, group_id: str) -> int:
        return len(self.selected.get(group_id, ()))

    def is_group_satisfied(self, group_id: str) -> bool:
        g = self.groups[group_id]
        if not g.is_required:
            return True
        return self.count(group_id) == g.limit

    def can_submit(self) -> bool:
        return all(self.is_group_satisfied(gid) for gid in self._order)

    def missing_groups(self) -> List[str]:
        return [self.groups[gid].name for gid in self._order if not self.is_group_satisfied(gid)]

    def selected_variations(self) -> List[SelectedVariation]:
        out: List[SelectedVariation] = []
        for gid in self._order:
            g = self.groups[gid]
            for o in g.options:
                if o.id in self.selected[gid]:
                    out.append(SelectedVariation(
                        group_id=g.id,
                        group_name=g.name,
                        option_id=o.id,
                        option_name=o.name,
                        price_adjustment=o.price_adjustment,
                    ))
        return out

    def selected_extras(self) -> List[Extra]:
        return [e for eid, e in self.extras.items() if eid in self.selected_extra_ids]

    def compute_total(self, base_price, quantity: int = 1) -> Decimal:
        adjustments = [v.price_adjustment for v in self.selected_variations()]
        extras = [e.price for e in self.selected_extras()]
        return line_total(base_price, adjustments, extras, quantity)

    def snapshot(self) -> Dict[str, List[str]]:
        """Seleção atual em forma serializável (listas na ordem do catálogo)."""
        return {
            gid: [o.id for o in self.groups[gid].options if o.id in self.selected[gid]]
            for gid in self._order
        }
