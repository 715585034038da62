# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later

# Key identifiers flow through three layers:
# keycodes: canonical spelling of any key, mouse button or controller button
# bindings: which action fires from which key
# remaps: what an external tool turns a physical key into before the game sees it
# fingers is ergonomic metadata hanging off the same key identifiers.
