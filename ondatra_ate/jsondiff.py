# Copyright 2020 Nokia
# Licensed under the Apache License 2.0.
# SPDX-License-Identifier: Apache-2.0

"""Structural diff of two IxNetwork JSON configs."""
index_keys = ["xpath", "name", "id"]


class jsondiff(object):
    """
    Class to find json diff

    Results are lists of dicts, one per difference, keyed by "---" (removed),
    "+++" (added) or "chg" (modified) with the location of the difference.
    """

    def cmp_dict(self, new, old, parent=""):
        result = []
        keydiff = self._get_dict_key_diff(new, old)

        # removed
        for k in keydiff["---"]:
            result.append({"---": "{}[{}]".format(parent, k), "value": old[k]})
        # added
        for k in keydiff["+++"]:
            result.append({"+++": "{}[{}]".format(parent, k), "value": new[k]})

        # modified
        for k in keydiff["common"]:
            location = "{}[{}]".format(parent, k)
            if isinstance(old[k], dict) and isinstance(new[k], dict):
                result.extend(self.cmp_dict(new[k], old[k], parent=location))
            elif isinstance(old[k], list) and isinstance(new[k], list):
                result.extend(self._cmp_list(new[k], old[k], parent=location))
            elif not old[k] == new[k]:
                result.append({"chg": location, "old_value": old[k], "new_value": new[k]})

        return result

    def _find_index_key(self, old_dicts):
        """Returns the index key present in most of the dicts, or None."""
        max_ct = 0
        key = None
        for i in index_keys:
            ct = sum(1 for o in old_dicts if i in o)
            if ct > max_ct and self.are_values_unique([o[i] for o in old_dicts if i in o]):
                max_ct = ct
                key = i
        return key

    def are_values_unique(self, vals):
        return len(set(map(str, vals))) == len(vals)

    def _cmp_list(self, new, old_in, parent=""):
        result = []
        old = old_in[:]  # entries left at the end were removed
        old_dicts = [o for o in old if isinstance(o, dict)]
        ind_key = self._find_index_key(old_dicts) if len(old_dicts) > 1 else None

        for index, n in enumerate(new):
            location = "{}[{}]".format(parent, index)
            if n in old:
                old.remove(n)
                continue
            if not isinstance(n, dict):
                result.append({"+++": location, "value": n})
                continue

            remaining = [o for o in old if isinstance(o, dict)]
            if not remaining:
                match = None
            elif ind_key is not None:
                match = next(
                    (o for o in remaining if ind_key in n and o.get(ind_key) == n[ind_key]),
                    None,
                )
            elif len(remaining) == 1:
                match = remaining[0]
            else:
                match = self._closest(n, remaining)

            if match is None:
                result.append({"+++": location, "value": n})
            else:
                old.remove(match)
                result.extend(self.cmp_dict(n, match, location))

        for index, o in enumerate(old_in):
            if any(o is r for r in old):
                result.append({"---": "{}[{}]".format(parent, index), "value": o})
        return result

    @staticmethod
    def _closest(n, candidates):
        max_equal_flds = 0
        closest = None
        for o in candidates:
            equal_flds_ct = sum(1 for k, v in n.items() if k in o and o[k] == v)
            if equal_flds_ct > max_equal_flds:
                max_equal_flds = equal_flds_ct
                closest = o
        return closest

    def _get_dict_key_diff(self, new, old):
        plus_ks = [k for k in new if k not in old]
        minus_ks = [k for k in old if k not in new]
        return {
            "+++": plus_ks,
            "---": minus_ks,
            "common": [k for k in new if k not in plus_ks],
        }
