import threading
import unittest
from multisig.wallet import MultiSigWallet
from multisig.vault import Vault
from multisig.identity import OwnerKey
from multisig.events import Execute
from multisig.errors import AlreadyConfirmed, AlreadyExecuted, ExecutionFailed


class TestExecutionEffects(unittest.TestCase):

    def setUp(self):
        """Set up test fixtures"""
        self.a, self.b, self.c = [OwnerKey.generate_key_pair()[1] for _ in range(3)]
        self.x = OwnerKey.generate_key_pair()[1]

    def _ready_wallet(self, balance, value=100):
        wallet = MultiSigWallet([self.a, self.b, self.c], 2, vault=Vault(balance))
        wallet.submit(self.a, self.x, value, b"\x01\x02")
        wallet.confirm(self.a, 0)
        wallet.confirm(self.b, 0)
        return wallet

    def test_failed_transfer_consumes_execution(self):
        """Insufficient balance fails the call and the transaction stays executed"""
        wallet = self._ready_wallet(balance=10)

        with self.assertRaises(ExecutionFailed):
            wallet.execute(self.a, 0)

        self.assertTrue(wallet.get_transaction(0).executed)
        self.assertEqual(wallet.get_balance(), 10)
        self.assertEqual(wallet.vault.balance_of(self.x), 0)
        self.assertEqual(wallet.events(Execute), [])

        # Funding afterwards does not allow a retry
        wallet.deposit(self.c, 1_000)
        with self.assertRaises(AlreadyExecuted):
            wallet.execute(self.a, 0)

    def test_transfer_receives_payload(self):
        wallet = self._ready_wallet(balance=500)
        wallet.execute(self.c, 0)

        payouts = wallet.vault.get_payout_history()
        self.assertEqual(len(payouts), 1)
        self.assertEqual(payouts[0].to, self.x)
        self.assertEqual(payouts[0].value, 100)
        self.assertEqual(payouts[0].data, b"\x01\x02")

    def test_reentrant_execute_is_rejected(self):
        """A recipient calling back into execute sees the transaction as executed"""
        wallet = self._ready_wallet(balance=500)
        reentry_errors = []

        def recipient_hook(value, data):
            self.assertTrue(wallet.get_transaction(0).executed)
            try:
                wallet.execute(self.b, 0)
            except AlreadyExecuted as exc:
                reentry_errors.append(exc)
            return True

        wallet.vault.register_recipient(self.x, recipient_hook)
        wallet.execute(self.a, 0)

        self.assertEqual(len(reentry_errors), 1)
        self.assertEqual(wallet.vault.balance_of(self.x), 100)
        self.assertEqual(wallet.get_balance(), 400)
        self.assertEqual(wallet.vault.payout_count(self.x), 1)
        self.assertEqual(wallet.events(Execute), [Execute(self.a, 0)])

    def test_rejecting_recipient_fails_execution(self):
        wallet = self._ready_wallet(balance=500)
        wallet.vault.register_recipient(self.x, lambda value, data: False)

        with self.assertRaises(ExecutionFailed):
            wallet.execute(self.a, 0)

        self.assertTrue(wallet.get_transaction(0).executed)
        self.assertEqual(wallet.get_balance(), 500)
        self.assertEqual(wallet.vault.balance_of(self.x), 0)

    def test_raising_recipient_fails_execution(self):
        wallet = self._ready_wallet(balance=500)

        def explode(value, data):
            raise RuntimeError("recipient crashed")

        wallet.vault.register_recipient(self.x, explode)

        with self.assertRaises(ExecutionFailed) as ctx:
            wallet.execute(self.a, 0)

        self.assertIn("recipient crashed", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, RuntimeError)
        self.assertTrue(wallet.get_transaction(0).executed)
        self.assertEqual(wallet.get_balance(), 500)


class TestConcurrency(unittest.TestCase):

    def setUp(self):
        self.owners = [OwnerKey.generate_key_pair()[1] for _ in range(8)]
        self.x = OwnerKey.generate_key_pair()[1]
        self.wallet = MultiSigWallet(self.owners, 5, vault=Vault(10_000))
        self.wallet.submit(self.owners[0], self.x, 1_000)

    def _run_all(self, target, args_list):
        threads = [threading.Thread(target=target, args=args) for args in args_list]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    def test_parallel_confirmations(self):
        """Every owner confirming twice in parallel counts each owner once"""
        rejected = []

        def confirm(owner):
            try:
                self.wallet.confirm(owner, 0)
            except AlreadyConfirmed:
                rejected.append(owner)

        self._run_all(confirm, [(o,) for o in self.owners * 2])

        self.assertEqual(self.wallet.get_transaction(0).num_confirmations, len(self.owners))
        self.assertEqual(len(rejected), len(self.owners))
        self.assertEqual(self.wallet.get_confirmations(0), self.owners)

    def test_wallets_sharing_a_vault(self):
        """Deposits and payouts from two wallets keep one consistent balance"""
        vault = Vault(0)
        first = MultiSigWallet(self.owners[:2], 1, vault=vault)
        second = MultiSigWallet(self.owners[2:4], 1, vault=vault)

        def fund(wallet, sender):
            for _ in range(200):
                wallet.deposit(sender, 1)

        self._run_all(fund, [(first, self.owners[0]), (second, self.owners[2])] * 4)
        self.assertEqual(vault.total_balance, 1_600)

        for wallet, owner in ((first, self.owners[0]), (second, self.owners[2])):
            for _ in range(10):
                index = wallet.submit(owner, self.x, 10)
                wallet.confirm(owner, index)

        def drain(wallet, owner):
            for index in range(10):
                wallet.execute(owner, index)

        self._run_all(drain, [(first, self.owners[0]), (second, self.owners[2])])

        self.assertEqual(vault.total_balance, 1_400)
        self.assertEqual(vault.balance_of(self.x), 200)
        self.assertEqual(vault.payout_count(self.x), 20)

    def test_parallel_execution_runs_once(self):
        for owner in self.owners[:5]:
            self.wallet.confirm(owner, 0)

        outcomes = []

        def execute(owner):
            try:
                self.wallet.execute(owner, 0)
                outcomes.append('ok')
            except AlreadyExecuted:
                outcomes.append('already')

        self._run_all(execute, [(o,) for o in self.owners])

        self.assertEqual(outcomes.count('ok'), 1)
        self.assertEqual(outcomes.count('already'), len(self.owners) - 1)
        self.assertEqual(self.wallet.get_balance(), 9_000)
        self.assertEqual(self.wallet.vault.payout_count(), 1)


if __name__ == '__main__':
    unittest.main()
