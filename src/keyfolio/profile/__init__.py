# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later

# A profile is the live configuration of one user (bindings, device config, remaps,
# finger map, item layouts, search crafts) plus the presets that snapshot it.
