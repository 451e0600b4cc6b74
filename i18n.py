from typing import Optional, Union

from models import Language

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        "overview": "Overview",
        "transactions": "Transactions",
        "budgeting": "Budgeting",
        "settings": "Settings",
        "signOut": "Sign Out",
        "exitDemo": "Exit Demo",
        "demoMode": "Demo Mode",
        "demoNotice": "You are currently in Demo Mode. Changes are saved locally to your browser.",
        "totalBalance": "Total Balance",
        "income": "Income",
        "expense": "Expense",
        "savingsRate": "Savings Rate",
        "excellent": "Excellent",
        "good": "Good",
        "needsWork": "Needs work",
        "noIncome": "No income yet",
        "cashFlow": "Cash Flow",
        "dailyFlow": "Daily Activity",
        "topSpending": "Top Spending",
        "recentTransactions": "Recent Transactions",
        "noTransactions": "No transactions in this period.",
        "addTransaction": "Add Transaction",
        "amount": "Amount",
        "description": "Description",
        "category": "Category",
        "type": "Type",
        "date": "Date",
        "delete": "Delete",
        "save": "Save",
        "saving": "Saving...",
        "saveChanges": "Save Changes",
        "budgetLimits": "Monthly Budget Limits",
        "spent": "Spent",
        "remaining": "Remaining",
        "overBudget": "Over budget",
        "addCategory": "Add category",
        "initialBalance": "Initial Balance",
        "editBalance": "Edit initial balance",
        "period": "Period",
        "thisMonth": "This month",
        "lastMonth": "Last month",
        "last3Months": "Last 3 months",
        "allTime": "All time",
        "custom": "Custom",
        "apply": "Apply",
        "welcomeSetup": "Welcome! Let's set things up",
        "setupDesc": "A few quick questions to personalise your dashboard.",
        "stepLang": "Choose your language",
        "step1": "What should we call you?",
        "step2": "Pick your currency",
        "step3": "Monthly budget goal",
        "namePlaceholder": "Your name",
        "budgetPlaceholder": "e.g. 5000000",
        "budgetHint": "We'll use this to help you track your monthly limits.",
        "back": "Back",
        "next": "Next",
        "finish": "Finish",
        "loginTitle": "Welcome back",
        "registerTitle": "Create an account",
        "loginDesc": "Sign in to continue to your dashboard.",
        "registerDesc": "Start tracking your money in minutes.",
        "email": "Email",
        "password": "Password",
        "signIn": "Sign In",
        "signUp": "Sign Up",
        "noAccount": "Don't have an account?",
        "hasAccount": "Already have an account?",
        "tryDemo": "Try Demo Account (No Login)",
        "account": "Account",
        "preferences": "Preferences",
        "notifications": "Notifications",
        "displayName": "Display Name",
        "currency": "Currency",
        "language": "Language",
        "darkMode": "Dark Mode",
        "emailAlerts": "Email Alerts",
        "monthlyReport": "Monthly Report",
        "tourTitle": "Quick tour",
        "tourBody": "Your balance, income, expenses and savings rate live at the top. Add transactions from the Transactions page and set limits under Budgeting.",
        "gotIt": "Got it",
        "heroTitle": "Master your personal finance.",
        "heroBody": "Track income and expenses, set budgets and see where your money goes.",
        "getStarted": "Get Started",
    },
    "id": {
        "overview": "Ringkasan",
        "transactions": "Transaksi",
        "budgeting": "Anggaran",
        "settings": "Pengaturan",
        "signOut": "Keluar",
        "exitDemo": "Keluar Demo",
        "demoMode": "Mode Demo",
        "demoNotice": "Anda sedang dalam Mode Demo. Perubahan disimpan secara lokal di browser Anda.",
        "totalBalance": "Total Saldo",
        "income": "Pemasukan",
        "expense": "Pengeluaran",
        "savingsRate": "Tingkat Tabungan",
        "excellent": "Sangat baik",
        "good": "Baik",
        "needsWork": "Perlu perbaikan",
        "noIncome": "Belum ada pemasukan",
        "cashFlow": "Arus Kas",
        "dailyFlow": "Aktivitas Harian",
        "topSpending": "Pengeluaran Teratas",
        "recentTransactions": "Transaksi Terbaru",
        "noTransactions": "Tidak ada transaksi pada periode ini.",
        "addTransaction": "Tambah Transaksi",
        "amount": "Jumlah",
        "description": "Deskripsi",
        "category": "Kategori",
        "type": "Jenis",
        "date": "Tanggal",
        "delete": "Hapus",
        "save": "Simpan",
        "saving": "Menyimpan...",
        "saveChanges": "Simpan Perubahan",
        "budgetLimits": "Batas Anggaran Bulanan",
        "spent": "Terpakai",
        "remaining": "Sisa",
        "overBudget": "Melebihi anggaran",
        "addCategory": "Tambah kategori",
        "initialBalance": "Saldo Awal",
        "editBalance": "Ubah saldo awal",
        "period": "Periode",
        "thisMonth": "Bulan ini",
        "lastMonth": "Bulan lalu",
        "last3Months": "3 bulan terakhir",
        "allTime": "Semua",
        "custom": "Kustom",
        "apply": "Terapkan",
        "welcomeSetup": "Selamat datang! Mari kita atur",
        "setupDesc": "Beberapa pertanyaan singkat untuk menyesuaikan dasbor Anda.",
        "stepLang": "Pilih bahasa Anda",
        "step1": "Siapa nama Anda?",
        "step2": "Pilih mata uang Anda",
        "step3": "Target anggaran bulanan",
        "namePlaceholder": "Nama Anda",
        "budgetPlaceholder": "mis. 5000000",
        "budgetHint": "Kami akan menggunakan ini untuk membantu melacak batas bulanan Anda.",
        "back": "Kembali",
        "next": "Lanjut",
        "finish": "Selesai",
        "loginTitle": "Selamat datang kembali",
        "registerTitle": "Buat akun",
        "loginDesc": "Masuk untuk melanjutkan ke dasbor Anda.",
        "registerDesc": "Mulai lacak keuangan Anda dalam hitungan menit.",
        "email": "Email",
        "password": "Kata Sandi",
        "signIn": "Masuk",
        "signUp": "Daftar",
        "noAccount": "Belum punya akun?",
        "hasAccount": "Sudah punya akun?",
        "tryDemo": "Coba Akun Demo (Tanpa Login)",
        "account": "Akun",
        "preferences": "Preferensi",
        "notifications": "Notifikasi",
        "displayName": "Nama Tampilan",
        "currency": "Mata Uang",
        "language": "Bahasa",
        "darkMode": "Mode Gelap",
        "emailAlerts": "Peringatan Email",
        "monthlyReport": "Laporan Bulanan",
        "tourTitle": "Tur singkat",
        "tourBody": "Saldo, pemasukan, pengeluaran, dan tingkat tabungan ada di bagian atas. Tambahkan transaksi dari halaman Transaksi dan atur batas di Anggaran.",
        "gotIt": "Mengerti",
        "heroTitle": "Kuasai keuangan pribadi Anda.",
        "heroBody": "Lacak pemasukan dan pengeluaran, atur anggaran, dan lihat ke mana uang Anda pergi.",
        "getStarted": "Mulai",
    },
}


def get_translations(language: Optional[Union[Language, str]]) -> dict[str, str]:
    key = language.value if isinstance(language, Language) else (language or "en")
    return TRANSLATIONS.get(key, TRANSLATIONS["en"])
