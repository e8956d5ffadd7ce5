"""Static Unicode tables used by the math formatter.

All tables are read-only mappings built once at import time.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping


# Keys are command names without the leading backslash.
MATH_SYMBOLS: Mapping[str, str] = MappingProxyType({
    # Greek letters
    "alpha": "α", "beta": "β", "gamma": "γ", "delta": "δ",
    "epsilon": "ε", "varepsilon": "ε", "zeta": "ζ", "eta": "η",
    "theta": "θ", "vartheta": "ϑ", "iota": "ι", "kappa": "κ",
    "lambda": "λ", "mu": "μ", "nu": "ν", "xi": "ξ", "pi": "π",
    "rho": "ρ", "sigma": "σ", "tau": "τ", "upsilon": "υ",
    "phi": "φ", "varphi": "φ", "chi": "χ", "psi": "ψ", "omega": "ω",
    "Gamma": "Γ", "Delta": "Δ", "Theta": "Θ", "Lambda": "Λ",
    "Xi": "Ξ", "Pi": "Π", "Sigma": "Σ", "Phi": "Φ",
    "Psi": "Ψ", "Omega": "Ω",

    # Operators and relations
    "times": "×", "div": "÷", "cdot": "·", "pm": "±",
    "mp": "∓", "ast": "∗", "star": "⋆", "circ": "∘",
    "bullet": "•", "oplus": "⊕", "otimes": "⊗",
    "leq": "≤", "le": "≤", "geq": "≥", "ge": "≥", "neq": "≠", "ne": "≠",
    "approx": "≈", "equiv": "≡", "sim": "∼", "simeq": "≃", "cong": "≅",
    "propto": "∝", "ll": "≪", "gg": "≫",
    "subset": "⊂", "supset": "⊃", "subseteq": "⊆", "supseteq": "⊇",
    "in": "∈", "notin": "∉", "ni": "∋",
    "cap": "∩", "cup": "∪", "setminus": "∖",
    "land": "∧", "lor": "∨", "lnot": "¬", "neg": "¬",
    "forall": "∀", "exists": "∃", "nexists": "∄",
    "Rightarrow": "⇒", "Leftarrow": "⇐", "Leftrightarrow": "⇔",
    "implies": "⇒", "iff": "⇔",
    "rightarrow": "→", "leftarrow": "←", "leftrightarrow": "↔",
    "to": "→", "gets": "←", "mapsto": "↦",
    "uparrow": "↑", "downarrow": "↓", "updownarrow": "↕",

    # Misc symbols
    "infty": "∞", "partial": "∂", "nabla": "∇",
    "sum": "Σ", "prod": "Π", "int": "∫", "oint": "∮",
    "sqrt": "√", "surd": "√",
    "angle": "∠", "triangle": "△", "square": "□",
    "diamond": "◇", "clubsuit": "♣", "diamondsuit": "♦",
    "heartsuit": "♥", "spadesuit": "♠",
    "emptyset": "∅", "varnothing": "∅",
    "aleph": "ℵ", "wp": "℘", "Re": "ℜ", "Im": "ℑ",
    "hbar": "ℏ", "ell": "ℓ",
    "ldots": "…", "cdots": "⋯", "vdots": "⋮", "ddots": "⋱", "dots": "…",
    "prime": "′", "degree": "°",

    # Brackets
    "langle": "⟨", "rangle": "⟩",
    "lfloor": "⌊", "rfloor": "⌋",
    "lceil": "⌈", "rceil": "⌉",
    "left": "", "right": "",

    # Spacing
    "quad": "  ", "qquad": "    ", ",": " ", ";": " ", ":": " ", " ": " ",
    "!": "",
})

SUPERSCRIPTS: Mapping[str, str] = MappingProxyType({
    "0": "⁰", "1": "¹", "2": "²", "3": "³", "4": "⁴",
    "5": "⁵", "6": "⁶", "7": "⁷", "8": "⁸", "9": "⁹",
    "+": "⁺", "-": "⁻", "=": "⁼", "(": "⁽", ")": "⁾",
    "n": "ⁿ", "i": "ⁱ", "a": "ᵃ", "b": "ᵇ", "c": "ᶜ",
    "d": "ᵈ", "e": "ᵉ", "f": "ᶠ", "g": "ᵍ", "h": "ʰ",
    "j": "ʲ", "k": "ᵏ", "l": "ˡ", "m": "ᵐ", "o": "ᵒ",
    "p": "ᵖ", "r": "ʳ", "s": "ˢ", "t": "ᵗ", "u": "ᵘ",
    "v": "ᵛ", "w": "ʷ", "x": "ˣ", "y": "ʸ", "z": "ᶻ",
})

SUBSCRIPTS: Mapping[str, str] = MappingProxyType({
    "0": "₀", "1": "₁", "2": "₂", "3": "₃", "4": "₄",
    "5": "₅", "6": "₆", "7": "₇", "8": "₈", "9": "₉",
    "+": "₊", "-": "₋", "=": "₌", "(": "₍", ")": "₎",
    "a": "ₐ", "e": "ₑ", "h": "ₕ", "i": "ᵢ", "j": "ⱼ",
    "k": "ₖ", "l": "ₗ", "m": "ₘ", "n": "ₙ", "o": "ₒ",
    "p": "ₚ", "r": "ᵣ", "s": "ₛ", "t": "ₜ", "u": "ᵤ",
    "v": "ᵥ", "x": "ₓ",
})
